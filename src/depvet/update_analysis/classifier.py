"""
Keyword based classification of commit messages into an update verdict.
"""

import re
from collections.abc import Iterable
from types import MappingProxyType

from .data_models import CategoryCounts, HistoryRecord, Verdict

FIX = "fix"
PERFORMANCE = "performance"
BREAKING = "breaking"
FEATURE = "feature"

CATEGORY_KEYWORDS = MappingProxyType(
    {
        FIX: ("fix", "bug", "patch", "resolve", "correct"),
        PERFORMANCE: ("perf", "optimize", "performance", "speed", "faster"),
        BREAKING: ("breaking", "break", "remove", "deprecate"),
        FEATURE: ("feat", "feature", "add", "new"),
    }
)

# Built once at import and only ever read.
CATEGORY_PATTERNS = MappingProxyType(
    {
        category: re.compile("|".join(map(re.escape, keywords)), re.IGNORECASE)
        for category, keywords in CATEGORY_KEYWORDS.items()
    }
)

NO_IMPROVEMENTS_REASON = "no significant improvements found"


def count_categories(records: Iterable[HistoryRecord]) -> CategoryCounts:
    """Count, per category, the commits whose message mentions it anywhere."""
    tallies = dict.fromkeys(CATEGORY_PATTERNS, 0)
    for record in records:
        for category, pattern in CATEGORY_PATTERNS.items():
            if pattern.search(record.message):
                tallies[category] += 1
    return CategoryCounts(**tallies)


class UpdateClassifier:
    """Turns a range of commits into an approve/reject/undecided verdict."""

    def classify(self, records: Iterable[HistoryRecord]) -> Verdict:
        """
        Classify an update from the commits it would bring in.

        Breaking changes always win, then fixes and optimizations, then
        features. Anything else, including no commits at all, is undecided.
        """
        counts = count_categories(records)

        if counts.breaking > 0:
            return Verdict.reject(
                f"contains {counts.breaking} breaking changes", counts
            )

        if counts.fix > 0 or counts.performance > 0:
            reasons = []
            if counts.fix > 0:
                reasons.append(f"{counts.fix} fixes")
            if counts.performance > 0:
                reasons.append(f"{counts.performance} optimizations")
            return Verdict.approve(", ".join(reasons), counts)

        if counts.feature > 0:
            return Verdict.approve(f"{counts.feature} new features", counts)

        return Verdict.undecided(NO_IMPROVEMENTS_REASON, counts)
