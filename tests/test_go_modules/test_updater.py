"""Tests for applying updates with the go toolchain."""

import subprocess
from unittest.mock import patch

import pytest

from depvet.go_modules.updater import GoModuleUpdater
from depvet.update_analysis.data_models import Dependency
from depvet.update_analysis.errors import UpdateApplyError


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


class TestGoModuleUpdater:
    """Test GoModuleUpdater."""

    @patch("depvet.go_modules.updater.subprocess.run")
    def test_apply_update_runs_go_get(self, mock_run, tmp_path, sample_dependency):
        mock_run.return_value = completed()

        GoModuleUpdater(tmp_path).apply_update(sample_dependency)

        args, kwargs = mock_run.call_args
        assert args[0] == ["go", "get", "github.com/example/lib@v1.2.0"]
        assert kwargs["cwd"] == tmp_path

    @patch("depvet.go_modules.updater.subprocess.run")
    def test_apply_update_failure(self, mock_run, tmp_path, sample_dependency):
        mock_run.return_value = completed(1, stderr="go: module not found\n")

        with pytest.raises(UpdateApplyError, match="module not found"):
            GoModuleUpdater(tmp_path).apply_update(sample_dependency)

    def test_apply_update_without_latest_version(self, tmp_path):
        dep = Dependency(name="github.com/example/lib", current_version="v1.0.0")

        with pytest.raises(UpdateApplyError, match="No latest version"):
            GoModuleUpdater(tmp_path).apply_update(dep)

    @patch("depvet.go_modules.updater.subprocess.run")
    def test_tidy(self, mock_run, tmp_path):
        mock_run.return_value = completed()

        GoModuleUpdater(tmp_path, go_executable="/usr/local/go/bin/go").tidy()

        assert mock_run.call_args.args[0] == ["/usr/local/go/bin/go", "mod", "tidy"]

    @patch("depvet.go_modules.updater.subprocess.run")
    def test_missing_go_binary(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError("go")

        success, output = GoModuleUpdater(tmp_path).run_command(["version"])

        assert success is False
        assert "go" in output
