"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from depvet.update_analysis.data_models import Dependency, HistoryRecord
from depvet.update_analysis.errors import GitCommandError

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_record(commit_hash: str, message: str = "chore: tidy", age: int = 0):
    """Record whose timestamp is ``age`` minutes before BASE_TIME."""
    return HistoryRecord(
        hash=commit_hash,
        message=message,
        timestamp=BASE_TIME - timedelta(minutes=age),
        author="Test Author",
    )


def linear_history(count: int, prefix: str = "c") -> list[HistoryRecord]:
    """``count`` commits, newest first, named c{count-1} down to c0."""
    return [
        build_record(f"{prefix}{i}", f"chore: commit {i}", age=count - 1 - i)
        for i in reversed(range(count))
    ]


class FakeRepository:
    """In-memory RepositoryHandle over a linear, newest-first history.

    With ``shallow_boundary`` set, history ends at that commit until the
    first ``deepen`` call, like a shallow clone.
    """

    def __init__(
        self,
        commits: list[HistoryRecord],
        refs: dict[str, str] | None = None,
        remote_tags: dict[str, str] | None = None,
        fail_fetch: bool = False,
        fail_walk: bool = False,
        fail_head: bool = False,
        shallow_boundary: str | None = None,
    ):
        self.commits = commits
        self.refs = dict(refs or {})
        self.remote_tags = dict(remote_tags or {})
        self.fail_fetch = fail_fetch
        self.fail_walk = fail_walk
        self.fail_head = fail_head
        self.shallow_boundary = shallow_boundary
        self.fetch_tags_calls = 0
        self.fetched_remote_tags: list[str] = []
        self.deepen_calls: list[int] = []
        self.resolve_calls: list[str] = []
        self.walk_calls: list[tuple[str, int]] = []

    def fetch_tags(self) -> None:
        self.fetch_tags_calls += 1
        if self.fail_fetch:
            raise GitCommandError(["fetch", "--tags"], "network unreachable", 128)

    def list_remote_tags(self) -> list[str]:
        return list(self.remote_tags)

    def fetch_remote_tags(self, names: list[str]) -> None:
        for name in names:
            self.fetched_remote_tags.append(name)
            self.refs[f"refs/tags/{name}"] = self.remote_tags[name]

    def deepen(self, depth: int) -> None:
        self.deepen_calls.append(depth)
        self.shallow_boundary = None

    def resolve_ref(self, ref: str) -> str | None:
        self.resolve_calls.append(ref)
        return self.refs.get(ref)

    def walk_history(self, start: str, max_count: int):
        self.walk_calls.append((start, max_count))
        if self.fail_walk:
            raise GitCommandError(["log", start], "bad object", 128)
        hashes = [c.hash for c in self.commits]
        if start not in hashes:
            raise GitCommandError(["log", start], "unknown revision", 128)
        index = hashes.index(start)
        visible = self.commits
        if self.shallow_boundary in hashes:
            visible = self.commits[: hashes.index(self.shallow_boundary) + 1]
        yield from visible[index : index + max_count]

    def head(self) -> str:
        if self.fail_head:
            raise GitCommandError(["rev-parse", "HEAD"], "ambiguous argument", 128)
        return self.commits[0].hash


@pytest.fixture
def make_record():
    """Factory for history records."""
    return build_record


@pytest.fixture
def make_history():
    """Factory for linear newest-first histories."""
    return linear_history


@pytest.fixture
def fake_repository():
    """The FakeRepository class, for building in-memory repositories."""
    return FakeRepository


@pytest.fixture
def sample_dependency():
    """A dependency that has a newer version available."""
    dep = Dependency(name="github.com/example/lib", current_version="v1.0.0")
    dep.set_latest_version("v1.2.0")
    return dep


@pytest.fixture
def log_records():
    """Loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record))
    yield records
    logger.remove(handler_id)
