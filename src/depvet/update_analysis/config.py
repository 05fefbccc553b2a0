"""
Configuration system for dependency update analysis.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from ..shared_utilities import get_logger
from .errors import ConfigError

DEFAULT_COMMIT_CAP = 200
DEFAULT_PROXY_URL = "https://proxy.golang.org"

ENV_PREFIX = "DEPVET_"


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunables shared by every analysis in a run."""

    commit_cap: int = DEFAULT_COMMIT_CAP
    clone_depth: int = 1
    deepen_depth: int = 100  # history fetched when tag matching has to widen the range
    git_timeout: float = 120.0
    http_timeout: float = 30.0
    temp_root: str | None = None  # None means the platform temp directory
    proxy_url: str = DEFAULT_PROXY_URL
    max_workers: int = 1
    git_executable: str = "git"

    def __post_init__(self):
        """Validate numeric settings."""
        if self.commit_cap < 1:
            raise ConfigError(f"commit_cap must be positive, got {self.commit_cap}")
        if self.clone_depth < 1:
            raise ConfigError(f"clone_depth must be positive, got {self.clone_depth}")
        if self.deepen_depth < 1:
            raise ConfigError(
                f"deepen_depth must be positive, got {self.deepen_depth}"
            )
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")
        if self.git_timeout <= 0 or self.http_timeout <= 0:
            raise ConfigError("timeouts must be positive")

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _coerce(name: str, raw: Any, target: type) -> Any:
    try:
        if target is int:
            return int(raw)
        if target is float:
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


def _field_types() -> dict[str, type]:
    types = {}
    for f in fields(AnalysisConfig):
        if f.type in (int, float):
            types[f.name] = f.type
        else:
            types[f.name] = str
    return types


class ConfigManager:
    """Builds an AnalysisConfig from defaults, a JSON file and the environment."""

    def __init__(self, config_file: str | None = None):
        """Initialize config manager.

        Args:
            config_file: Optional path to a JSON file with AnalysisConfig keys
        """
        self.logger = get_logger(__name__)
        self.config_file = Path(config_file) if config_file else None

    def _load_file(self) -> dict[str, Any]:
        """Load settings from the JSON file, if one was given."""
        if self.config_file is None:
            return {}

        if not self.config_file.exists():
            raise ConfigError(f"Config file not found: {self.config_file}")

        try:
            with open(self.config_file) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_file} must hold an object")

        known = _field_types()
        unknown = set(data) - set(known)
        if unknown:
            self.logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

        return {
            key: _coerce(key, value, known[key])
            for key, value in data.items()
            if key in known and value is not None
        }

    def _load_env(self) -> dict[str, Any]:
        """Load DEPVET_* settings from the environment."""
        settings = {}
        for name, target in _field_types().items():
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw:
                settings[name] = _coerce(name, raw, target)
        return settings

    def load(self) -> AnalysisConfig:
        """Merge defaults, file and environment, later sources winning."""
        settings = self._load_file()
        settings.update(self._load_env())
        config = AnalysisConfig(**settings)
        self.logger.debug("Loaded analysis configuration", **settings)
        return config
