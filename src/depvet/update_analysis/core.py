"""
Core dependency update analysis.
"""

import tempfile
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Protocol

from ..shared_utilities import get_logger, trace_function
from .classifier import UpdateClassifier
from .config import AnalysisConfig
from .data_models import (
    AnalysisBatch,
    AnalysisFailure,
    AnalysisResult,
    Dependency,
    RangeResult,
    RangeSource,
    Verdict,
)
from .errors import UpdateAnalysisError, WorkspaceError
from .git_backend import RepositoryHandle, clone_repository
from .history import HistoryRangeExtractor
from .locator import RepositoryLocator
from .resolver import VersionRefResolver

RepositoryFactory = Callable[[str, Path], RepositoryHandle]


class VersionLookup(Protocol):
    """Fills in ``latest_version`` and ``update_needed`` on a dependency."""

    def get_latest_version(self, dependency: Dependency) -> None: ...


class AnalysisCoordinator:
    """
    Decides whether a dependency update looks safe to apply.

    Each analysis clones the dependency's repository into its own temporary
    directory, resolves both versions, reads the commits between them and
    classifies those commits. The clone is removed before the call returns.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        version_lookup: VersionLookup | None = None,
        repository_factory: RepositoryFactory | None = None,
        locator: RepositoryLocator | None = None,
        resolver: VersionRefResolver | None = None,
        extractor: HistoryRangeExtractor | None = None,
        classifier: UpdateClassifier | None = None,
    ):
        """Initialize coordinator.

        Args:
            config: Analysis settings, defaults when None
            version_lookup: Collaborator that finds the latest version; when None
                the dependency must already carry it
            repository_factory: Builds a repository handle from a URL and a
                destination directory, cloning with git by default
            locator: Module path to URL mapping
            resolver: Version string to commit resolution
            extractor: Commit range extraction
            classifier: Commit message classification
        """
        self.config = config or AnalysisConfig()
        self.logger = get_logger(__name__)
        self.version_lookup = version_lookup
        self.repository_factory = repository_factory or self._clone
        self.locator = locator or RepositoryLocator()
        self.resolver = resolver or VersionRefResolver(self.config.deepen_depth)
        self.extractor = extractor or HistoryRangeExtractor(self.config.commit_cap)
        self.classifier = classifier or UpdateClassifier()

    def _clone(self, url: str, destination: Path) -> RepositoryHandle:
        return clone_repository(
            url,
            destination,
            depth=self.config.clone_depth,
            git_executable=self.config.git_executable,
            timeout=self.config.git_timeout,
        )

    def _refresh_latest_version(self, dependency: Dependency) -> None:
        if self.version_lookup is not None:
            self.version_lookup.get_latest_version(dependency)
        elif dependency.latest_version is None:
            raise UpdateAnalysisError(
                f"No latest version known for {dependency.name}"
            )

    def _collect_range(self, dependency: Dependency) -> RangeResult:
        """Clone the repository into a throwaway directory and read the range."""
        location = self.locator.locate_with_status(dependency.name)
        if location.best_guess:
            self.logger.warning(
                f"Unknown repository host for {dependency.name}, "
                f"using best guess {location.url}"
            )

        try:
            workspace = tempfile.TemporaryDirectory(
                prefix="depvet-", dir=self.config.temp_root
            )
        except OSError as e:
            raise WorkspaceError(f"Failed to create temp directory: {e}") from e

        with workspace as tmp:
            repo = self.repository_factory(location.url, Path(tmp) / "repo")
            return self.extractor.extract_between_versions(
                repo,
                self.resolver,
                dependency.current_version,
                dependency.latest_version,
            )

    @trace_function("analyze_dependency", include_args=True)
    def analyze(self, dependency: Dependency) -> AnalysisResult:
        """
        Analyze one dependency.

        Args:
            dependency: Dependency with at least name and current version

        Returns:
            AnalysisResult with the commit range and verdict

        Raises:
            UpdateAnalysisError: On hard failures (lookup, clone, history read)
        """
        self._refresh_latest_version(dependency)

        if not dependency.update_needed:
            self.logger.info(
                f"No update needed for {dependency.name} "
                f"(already at {dependency.current_version})"
            )
            return AnalysisResult(
                dependency=dependency,
                range_result=RangeResult.empty(RangeSource.EXACT_RANGE),
                verdict=Verdict.undecided("no update needed"),
                skipped=True,
            )

        range_result = self._collect_range(dependency)
        if range_result.truncated:
            self.logger.info(
                f"History for {dependency.name} truncated to {range_result.count} commits"
            )
        self.logger.info(
            f"Found {range_result.count} commits ({range_result.source.value}) "
            f"for {dependency.name} {dependency.current_version} -> "
            f"{dependency.latest_version}"
        )

        verdict = self.classifier.classify(range_result.records)
        return AnalysisResult(
            dependency=dependency, range_result=range_result, verdict=verdict
        )

    def _analyze_isolated(
        self, dependency: Dependency
    ) -> AnalysisResult | AnalysisFailure:
        try:
            return self.analyze(dependency)
        except UpdateAnalysisError as e:
            self.logger.warning(f"Could not analyze {dependency.name}: {e}")
            return AnalysisFailure(dependency=dependency, error=str(e))

    def analyze_many(
        self, dependencies: Iterable[Dependency], max_workers: int | None = None
    ) -> AnalysisBatch:
        """
        Analyze several dependencies, isolating failures.

        Args:
            dependencies: Dependencies to analyze
            max_workers: Concurrent analyses, defaults to the configured value

        Returns:
            AnalysisBatch with results and failures in input order
        """
        workers = max_workers or self.config.max_workers
        dependencies = list(dependencies)

        if workers <= 1:
            outcomes = [self._analyze_isolated(dep) for dep in dependencies]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(self._analyze_isolated, dependencies))

        batch = AnalysisBatch()
        for outcome in outcomes:
            if isinstance(outcome, AnalysisFailure):
                batch.failures.append(outcome)
            else:
                batch.results.append(outcome)
        return batch
