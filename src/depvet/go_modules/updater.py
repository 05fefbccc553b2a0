"""
Applies approved updates to a Go project with the go toolchain.
"""

import subprocess
from pathlib import Path

from ..shared_utilities import get_logger
from ..update_analysis.data_models import Dependency
from ..update_analysis.errors import UpdateApplyError


class GoModuleUpdater:
    """Runs ``go get`` and ``go mod tidy`` inside a project."""

    def __init__(self, project_path: str | Path = ".", go_executable: str = "go"):
        self.project_path = Path(project_path)
        self.go_executable = go_executable
        self.logger = get_logger(__name__)

    def run_command(self, args: list[str]) -> tuple[bool, str]:
        """Run a go command and return success status and combined output."""
        try:
            result = subprocess.run(
                [self.go_executable, *args],
                capture_output=True,
                text=True,
                cwd=self.project_path,
                check=False,
            )
        except OSError as e:
            return False, str(e)
        return result.returncode == 0, result.stdout + result.stderr

    def apply_update(self, dependency: Dependency) -> None:
        """
        Upgrade ``dependency`` to its latest version.

        Raises:
            UpdateApplyError: If ``go get`` fails
        """
        if not dependency.latest_version:
            raise UpdateApplyError(f"No latest version known for {dependency.name}")

        success, output = self.run_command(
            ["get", f"{dependency.name}@{dependency.latest_version}"]
        )
        if not success:
            raise UpdateApplyError(
                f"Failed to update {dependency.name}: {output.strip()}"
            )

        self.logger.info(
            f"Updated {dependency.name} from {dependency.current_version} "
            f"to {dependency.latest_version}"
        )

    def tidy(self) -> None:
        """Run ``go mod tidy``."""
        success, output = self.run_command(["mod", "tidy"])
        if not success:
            raise UpdateApplyError(f"go mod tidy failed: {output.strip()}")
