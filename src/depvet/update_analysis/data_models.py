"""
Data models for dependency update analysis.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RangeSource(str, Enum):
    """How a RangeResult was produced."""

    EXACT_RANGE = "exact-range"
    RECENT_FALLBACK = "recent-fallback"


class Decision(str, Enum):
    """Tri-state outcome of classifying an update."""

    APPROVE = "approve"
    REJECT = "reject"
    UNDECIDED = "undecided"


@dataclass
class Dependency:
    """A single module requirement of the analysed project."""

    name: str  # module path, e.g. "github.com/spf13/cobra"
    current_version: str  # e.g. "v1.7.0"
    latest_version: str | None = None
    update_needed: bool = False

    def __post_init__(self):
        if self.latest_version is not None:
            self.update_needed = self.current_version != self.latest_version

    def set_latest_version(self, latest_version: str) -> None:
        """Record the latest available version and derive update_needed."""
        self.latest_version = latest_version
        self.update_needed = self.current_version != latest_version


@dataclass(frozen=True)
class HistoryRecord:
    """One commit in a dependency's source history."""

    hash: str
    message: str  # summary, optionally followed by a blank line and the body
    timestamp: datetime
    author: str = ""

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True)
class RangeResult:
    """Bounded, newest-first sequence of commits between two versions."""

    records: tuple[HistoryRecord, ...]
    source: RangeSource
    truncated: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_exact(self) -> bool:
        return self.source is RangeSource.EXACT_RANGE

    @classmethod
    def empty(cls, source: RangeSource = RangeSource.EXACT_RANGE) -> "RangeResult":
        return cls(records=(), source=source)


@dataclass(frozen=True)
class CategoryCounts:
    """Independent per-category keyword tallies over a set of commits."""

    fix: int = 0
    performance: int = 0
    breaking: int = 0
    feature: int = 0


@dataclass(frozen=True)
class Verdict:
    """Classification of an update with a short human readable reason."""

    decision: Decision
    reason: str
    counts: CategoryCounts = field(default_factory=CategoryCounts)

    @property
    def approved(self) -> bool:
        return self.decision is Decision.APPROVE

    @property
    def rejected(self) -> bool:
        return self.decision is Decision.REJECT

    @classmethod
    def approve(cls, reason: str, counts: CategoryCounts) -> "Verdict":
        if not reason:
            raise ValueError("An approval needs a reason")
        return cls(Decision.APPROVE, reason, counts)

    @classmethod
    def reject(cls, reason: str, counts: CategoryCounts) -> "Verdict":
        if not reason:
            raise ValueError("A rejection needs a reason")
        return cls(Decision.REJECT, reason, counts)

    @classmethod
    def undecided(
        cls, reason: str, counts: CategoryCounts | None = None
    ) -> "Verdict":
        return cls(Decision.UNDECIDED, reason, counts or CategoryCounts())


@dataclass(frozen=True)
class AnalysisResult:
    """Everything downstream consumers need to act on one dependency."""

    dependency: Dependency
    range_result: RangeResult
    verdict: Verdict
    skipped: bool = False  # True when no update was needed and nothing was walked


@dataclass(frozen=True)
class AnalysisFailure:
    """A dependency whose analysis failed hard."""

    dependency: Dependency
    error: str


@dataclass
class AnalysisBatch:
    """Results of analysing many dependencies in one run."""

    results: list[AnalysisResult] = field(default_factory=list)
    failures: list[AnalysisFailure] = field(default_factory=list)

    @property
    def approved(self) -> list[AnalysisResult]:
        return [r for r in self.results if not r.skipped and r.verdict.approved]

    @property
    def needs_review(self) -> list[AnalysisResult]:
        """Updates that were not approved and should be looked at by a person."""
        return [r for r in self.results if not r.skipped and not r.verdict.approved]

    @property
    def up_to_date(self) -> list[AnalysisResult]:
        return [r for r in self.results if r.skipped]
