"""
Version control backend used by the resolver and the history extractor.

The pipeline only talks to :class:`RepositoryHandle`; :class:`GitCliRepository`
binds it to the ``git`` command line.
"""

import os
import subprocess
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from ..shared_utilities import get_logger, trace_function
from .data_models import HistoryRecord
from .errors import GitCommandError, WorkspaceError

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"%H{FIELD_SEP}%aN{FIELD_SEP}%aI{FIELD_SEP}%B{RECORD_SEP}"

ALTERNATIVE_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%a %b %d %H:%M:%S %Y %z",
    "%a, %d %b %Y %H:%M:%S %z",
)

logger = get_logger(__name__)


class RepositoryHandle(Protocol):
    """Read capabilities the analysis needs from a cloned repository."""

    def fetch_tags(self) -> None: ...

    def list_remote_tags(self) -> list[str]: ...

    def fetch_remote_tags(self, names: list[str]) -> None: ...

    def deepen(self, depth: int) -> None: ...

    def resolve_ref(self, ref: str) -> str | None: ...

    def walk_history(self, start: str, max_count: int) -> Iterator[HistoryRecord]: ...

    def head(self) -> str: ...


def parse_commit_date(value: str) -> datetime:
    """Parse a git author date, falling back to now when it is unreadable."""
    value = value.strip()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in ALTERNATIVE_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    logger.debug(f"Could not parse commit date {value!r}, using current time")
    return datetime.now(timezone.utc)


def parse_log_output(output: str) -> list[HistoryRecord]:
    """Turn ``git log --format=LOG_FORMAT`` output into records."""
    records = []
    for chunk in output.split(RECORD_SEP):
        chunk = chunk.lstrip("\n")
        if not chunk:
            continue

        parts = chunk.split(FIELD_SEP, 3)
        if len(parts) < 4:
            logger.debug(f"Skipping malformed log entry: {chunk[:80]!r}")
            continue

        commit_hash, author, date_str, message = parts
        records.append(
            HistoryRecord(
                hash=commit_hash.strip(),
                message=message.strip(),
                timestamp=parse_commit_date(date_str),
                author=author.strip(),
            )
        )
    return records


class GitCliRepository:
    """A working copy driven through the ``git`` executable."""

    def __init__(
        self,
        path: str | Path,
        git_executable: str = "git",
        timeout: float = 120.0,
        remote: str = "origin",
    ):
        self.path = Path(path)
        self.git_executable = git_executable
        self.timeout = timeout
        self.remote = remote
        self._tags_fetched = False
        self._remote_tags: list[str] | None = None

    def __repr__(self) -> str:
        return f"GitCliRepository({str(self.path)!r})"

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a git command inside the working copy."""
        return run_git(
            args,
            cwd=self.path,
            git_executable=self.git_executable,
            timeout=self.timeout,
            check=check,
        )

    def fetch_tags(self) -> None:
        """Fetch every tag from the remote, overwriting local ones.

        Only the first call talks to the remote.
        """
        if self._tags_fetched:
            return
        self._tags_fetched = True
        self._run(["fetch", "--tags", "--force", "--quiet", self.remote])

    def list_remote_tags(self) -> list[str]:
        """Names of the tags advertised by the remote, without peel suffixes."""
        if self._remote_tags is None:
            result = self._run(["ls-remote", "--tags", self.remote])
            names: list[str] = []
            for line in result.stdout.splitlines():
                _, _, ref = line.partition("\t")
                if not ref.startswith("refs/tags/"):
                    continue
                name = ref[len("refs/tags/") :].removesuffix("^{}")
                if name not in names:
                    names.append(name)
            self._remote_tags = names
        return list(self._remote_tags)

    def fetch_remote_tags(self, names: list[str]) -> None:
        if not names:
            return
        refspecs = [f"refs/tags/{name}:refs/tags/{name}" for name in names]
        self._run(["fetch", "--force", "--quiet", self.remote, *refspecs])

    def is_shallow(self) -> bool:
        result = self._run(["rev-parse", "--is-shallow-repository"], check=False)
        return result.stdout.strip() == "true"

    def deepen(self, depth: int) -> None:
        """Fetch ``depth`` more commits of history when the clone is shallow."""
        if not self.is_shallow():
            return
        self._run(["fetch", f"--deepen={depth}", "--quiet", self.remote])

    def resolve_ref(self, ref: str) -> str | None:
        """Resolve a reference to the commit it points at, peeling tags."""
        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], check=False
        )
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return sha or None

    def walk_history(self, start: str, max_count: int) -> Iterator[HistoryRecord]:
        """Yield up to ``max_count`` commits reachable from ``start``, newest first."""
        result = self._run(
            ["log", f"--format={LOG_FORMAT}", f"--max-count={max_count}", start, "--"]
        )
        yield from parse_log_output(result.stdout)

    def head(self) -> str:
        result = self._run(["rev-parse", "HEAD"])
        return result.stdout.strip()


def run_git(
    args: list[str],
    cwd: str | Path | None = None,
    git_executable: str = "git",
    timeout: float = 120.0,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run git non-interactively, raising GitCommandError on failure when ``check``."""
    env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
    try:
        result = subprocess.run(
            [git_executable, *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(args, f"timed out after {timeout}s") from e
    except OSError as e:
        raise GitCommandError(args, str(e)) from e

    if check and result.returncode != 0:
        raise GitCommandError(args, result.stderr.strip(), result.returncode)
    return result


@trace_function("clone_repository", include_args=True)
def clone_repository(
    url: str,
    destination: str | Path,
    depth: int = 1,
    git_executable: str = "git",
    timeout: float = 120.0,
) -> GitCliRepository:
    """Make a shallow, single-branch, tagless clone of ``url``.

    Raises:
        WorkspaceError: If the clone fails
    """
    args = [
        "clone",
        f"--depth={depth}",
        "--no-tags",
        "--filter=blob:none",
        "--single-branch",
        "--quiet",
        url,
        str(destination),
    ]
    try:
        run_git(args, git_executable=git_executable, timeout=timeout)
    except GitCommandError as e:
        raise WorkspaceError(f"Failed to clone repository {url}: {e}") from e

    logger.debug(f"Cloned {url} into {destination}")
    return GitCliRepository(destination, git_executable=git_executable, timeout=timeout)
