"""
Extraction of the commits between two resolved versions.
"""

from enum import Enum

from ..shared_utilities import get_logger, trace_operation
from .config import DEFAULT_COMMIT_CAP
from .data_models import HistoryRecord, RangeResult, RangeSource
from .errors import GitCommandError, HistoryExtractionError
from .git_backend import RepositoryHandle
from .resolver import VersionRefResolver


class WalkStep(Enum):
    """What the range walk should do with the record it is looking at."""

    CONTINUE = "continue"
    STOP_AT_BOUNDARY = "stop-at-boundary"
    STOP_AT_CAP = "stop-at-cap"


def next_step(
    record: HistoryRecord, boundary: str, emitted: int, cap: int
) -> WalkStep:
    """Decide whether ``record`` is emitted or ends the walk.

    The boundary commit itself is never emitted.
    """
    if record.hash == boundary:
        return WalkStep.STOP_AT_BOUNDARY
    if emitted >= cap:
        return WalkStep.STOP_AT_CAP
    return WalkStep.CONTINUE


class HistoryRangeExtractor:
    """Produces the bounded, newest-first history between two commits."""

    def __init__(self, cap: int = DEFAULT_COMMIT_CAP):
        self.logger = get_logger(__name__)
        self.cap = cap

    def _walk_range(
        self, repo: RepositoryHandle, from_node: str, to_node: str
    ) -> tuple[list[HistoryRecord], WalkStep]:
        """Walk back from ``to_node`` until ``from_node`` or the cap.

        A final step of CONTINUE means history ran out before the boundary.
        """
        records: list[HistoryRecord] = []
        step = WalkStep.CONTINUE
        # One extra so that hitting the cap can be told apart from hitting
        # the boundary right after it.
        for record in repo.walk_history(to_node, self.cap + 1):
            step = next_step(record, from_node, len(records), self.cap)
            if step is not WalkStep.CONTINUE:
                break
            records.append(record)
        return records, step

    def _deepen(self, repo: RepositoryHandle) -> None:
        """Fetch ``cap`` more commits of history, tolerating failure."""
        try:
            repo.deepen(self.cap)
        except GitCommandError as e:
            self.logger.debug(f"Could not deepen history: {e}")

    def _exact_range(
        self, repo: RepositoryHandle, from_node: str, to_node: str
    ) -> tuple[RangeResult | None, bool]:
        """Walk the exact range, deepening once if history runs out.

        Returns the range, or None when the nodes are not connected, and
        whether the history was deepened on the way.
        """
        records, step = self._walk_range(repo, from_node, to_node)
        deepened = False
        if step is WalkStep.CONTINUE:
            # A shallow clone stops at its boundary commit, which can be to_node
            self._deepen(repo)
            deepened = True
            records, step = self._walk_range(repo, from_node, to_node)

        if step is WalkStep.CONTINUE:
            return None, deepened
        return (
            RangeResult(
                records=tuple(records),
                source=RangeSource.EXACT_RANGE,
                truncated=step is WalkStep.STOP_AT_CAP,
            ),
            deepened,
        )

    def _recent(self, repo: RepositoryHandle, deepen: bool = True) -> RangeResult:
        """Most recent commits from HEAD, used when no exact range exists."""
        if deepen:
            self._deepen(repo)

        try:
            head = repo.head()
            records = list(repo.walk_history(head, self.cap + 1))
        except GitCommandError as e:
            raise HistoryExtractionError(f"Failed to get commit history: {e}") from e

        truncated = len(records) > self.cap
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return RangeResult(
            records=tuple(records[: self.cap]),
            source=RangeSource.RECENT_FALLBACK,
            truncated=truncated,
        )

    def extract(
        self,
        repo: RepositoryHandle,
        from_node: str | None,
        to_node: str | None,
    ) -> RangeResult:
        """
        Extract the commits after ``from_node`` up to and including ``to_node``.

        Args:
            repo: Repository to read history from
            from_node: Commit of the current version, None if unresolved
            to_node: Commit of the latest version, None if unresolved

        Returns:
            An exact range when both commits resolved and are connected,
            otherwise the most recent commits from HEAD

        Raises:
            HistoryExtractionError: If the fallback cannot read history
        """
        if from_node is not None and from_node == to_node:
            return RangeResult.empty(RangeSource.EXACT_RANGE)

        with trace_operation(
            "extract_history", {"from": from_node or "", "to": to_node or ""}
        ):
            deepened = False
            if from_node is not None and to_node is not None:
                try:
                    exact, deepened = self._exact_range(repo, from_node, to_node)
                except GitCommandError as e:
                    self.logger.warning(f"Range walk failed, using recent history: {e}")
                else:
                    if exact is not None:
                        return exact
                    self.logger.warning(
                        f"{from_node[:12]} is not an ancestor of {to_node[:12]}, "
                        "using recent history"
                    )

            result = self._recent(repo, deepen=not deepened)
            self.logger.warning(
                f"Using {result.count} recent commits instead of an exact range"
            )
            return result

    def extract_between_versions(
        self,
        repo: RepositoryHandle,
        resolver: VersionRefResolver,
        current_version: str,
        latest_version: str,
    ) -> RangeResult:
        """Resolve both versions and extract the range between them.

        Identical version strings short-circuit before any resolution.
        """
        if current_version == latest_version:
            return RangeResult.empty(RangeSource.EXACT_RANGE)

        from_node = resolver.resolve(repo, current_version)
        to_node = resolver.resolve(repo, latest_version)
        return self.extract(repo, from_node, to_node)
