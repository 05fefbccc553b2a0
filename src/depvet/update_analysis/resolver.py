"""
Resolution of raw version strings to commits.
"""

from ..shared_utilities import get_logger, trace_operation
from .errors import GitCommandError
from .git_backend import RepositoryHandle


def candidate_refs(version: str) -> list[str]:
    """Reference spellings tried for a version, in priority order."""
    return [
        f"refs/tags/{version}",
        f"refs/tags/v{version}",
        version,
        f"v{version}",
    ]


class VersionRefResolver:
    """
    Resolves version strings like ``v1.2.3`` or ``1.2.3`` to commit hashes.

    Exact reference spellings are always preferred. When none of them resolve,
    tags whose names contain the version string are fetched from the remote
    (or, failing that, more history is fetched) and the exact spellings are
    tried once more. A substring match is never returned as the answer.
    """

    def __init__(self, deepen_depth: int = 100):
        """Initialize resolver.

        Args:
            deepen_depth: Commits to fetch when no remote tag matches at all
        """
        self.logger = get_logger(__name__)
        self.deepen_depth = deepen_depth

    def _ensure_tags(self, repo: RepositoryHandle) -> None:
        """Fetch tags, tolerating failure."""
        try:
            repo.fetch_tags()
        except GitCommandError as e:
            self.logger.warning(f"Could not fetch tags, using local refs only: {e}")

    def _resolve_exact(self, repo: RepositoryHandle, version: str) -> str | None:
        for ref in candidate_refs(version):
            node = repo.resolve_ref(ref)
            if node:
                self.logger.debug(f"Resolved {version} via {ref} to {node}")
                return node
        return None

    def _widen(self, repo: RepositoryHandle, version: str) -> None:
        """Fetch more refs or history that might contain ``version``."""
        try:
            remote_tags = repo.list_remote_tags()
        except GitCommandError as e:
            self.logger.debug(f"Listing remote tags failed: {e}")
            remote_tags = []

        matches = [tag for tag in remote_tags if version in tag]
        try:
            if matches:
                self.logger.debug(
                    f"Fetching {len(matches)} remote tags containing {version}"
                )
                repo.fetch_remote_tags(matches)
            else:
                repo.deepen(self.deepen_depth)
        except GitCommandError as e:
            self.logger.debug(f"Widening fetch for {version} failed: {e}")

    def resolve(self, repo: RepositoryHandle, version: str) -> str | None:
        """
        Resolve ``version`` to a commit hash.

        Args:
            repo: Repository to resolve against
            version: Raw version string

        Returns:
            The commit hash, or None when no reference matches
        """
        with trace_operation("resolve_version", {"version": version}):
            self._ensure_tags(repo)

            node = self._resolve_exact(repo, version)
            if node is None:
                self._widen(repo, version)
                node = self._resolve_exact(repo, version)

            if node is None:
                self.logger.warning(f"No reference found for version {version}")
            return node
