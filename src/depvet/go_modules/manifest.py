"""
Reader for the direct requirements declared in a go.mod file.
"""

from pathlib import Path

from ..shared_utilities import get_logger
from ..update_analysis.data_models import Dependency
from ..update_analysis.errors import ManifestError

INDIRECT_MARKER = "// indirect"


def _parse_requirement(line: str) -> tuple[str, str] | None:
    """Split ``module version [// comment]`` into module and version."""
    if INDIRECT_MARKER in line:
        return None
    code = line.split("//", 1)[0].strip()
    parts = code.split()
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def parse_go_mod(content: str) -> list[Dependency]:
    """Parse direct requirements out of go.mod content.

    Handles single-line ``require`` statements and ``require ( ... )`` blocks.
    Indirect requirements and comments are skipped. Results are sorted by
    module path.
    """
    requirements: dict[str, str] = {}
    in_require_block = False

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("//"):
            continue

        if in_require_block:
            if line == ")":
                in_require_block = False
                continue
            parsed = _parse_requirement(line)
        elif line.startswith("require (") or line == "require(":
            in_require_block = True
            continue
        elif line.startswith("require "):
            parsed = _parse_requirement(line[len("require ") :])
        else:
            continue

        if parsed:
            name, version = parsed
            requirements[name] = version

    return [
        Dependency(name=name, current_version=version)
        for name, version in sorted(requirements.items())
    ]


class GoModReader:
    """Reads the dependencies of a Go project."""

    def __init__(self, project_path: str | Path = "."):
        self.project_path = Path(project_path)
        self.logger = get_logger(__name__)

    @property
    def go_mod_path(self) -> Path:
        return self.project_path / "go.mod"

    def get_dependencies(self) -> list[Dependency]:
        """
        Get the direct dependencies of the project.

        Raises:
            ManifestError: If go.mod cannot be read
        """
        try:
            content = self.go_mod_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Failed to open go.mod: {e}") from e

        dependencies = parse_go_mod(content)
        self.logger.debug(f"Found {len(dependencies)} direct dependencies")
        return dependencies
