"""
Dependency update analysis toolkit.

Decides from commit history whether a dependency upgrade looks safe to apply.
"""

from .classifier import UpdateClassifier
from .config import AnalysisConfig, ConfigManager
from .core import AnalysisCoordinator
from .data_models import (
    AnalysisBatch,
    AnalysisResult,
    Decision,
    Dependency,
    HistoryRecord,
    RangeResult,
    RangeSource,
    Verdict,
)
from .errors import UpdateAnalysisError
from .history import HistoryRangeExtractor
from .locator import RepositoryLocator
from .resolver import VersionRefResolver

__all__ = [
    "AnalysisBatch",
    "AnalysisConfig",
    "AnalysisCoordinator",
    "AnalysisResult",
    "ConfigManager",
    "Decision",
    "Dependency",
    "HistoryRangeExtractor",
    "HistoryRecord",
    "RangeResult",
    "RangeSource",
    "RepositoryLocator",
    "UpdateAnalysisError",
    "UpdateClassifier",
    "Verdict",
    "VersionRefResolver",
]
