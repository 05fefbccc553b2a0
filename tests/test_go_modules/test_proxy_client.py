"""Tests for the module proxy client."""

from unittest.mock import Mock

import pytest
import requests

from depvet.go_modules.proxy_client import ModuleProxyClient, escape_module_path
from depvet.update_analysis.data_models import Dependency
from depvet.update_analysis.errors import VersionLookupError


def make_session(payload=None, error=None, json_error=None):
    """Mock session whose get() returns ``payload`` or raises ``error``."""
    session = Mock()
    if error is not None:
        session.get.side_effect = error
        return session
    response = Mock()
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    session.get.return_value = response
    return session


class TestEscapeModulePath:
    """Test proxy case encoding."""

    def test_upper_case_is_escaped(self):
        assert (
            escape_module_path("github.com/BurntSushi/toml")
            == "github.com/!burnt!sushi/toml"
        )

    def test_lower_case_unchanged(self):
        assert escape_module_path("golang.org/x/mod") == "golang.org/x/mod"


class TestModuleProxyClient:
    """Test ModuleProxyClient."""

    def test_latest_version_url(self):
        client = ModuleProxyClient("https://proxy.example/", session=Mock())

        assert (
            client.latest_version_url("github.com/Azure/go-autorest")
            == "https://proxy.example/github.com/!azure/go-autorest/@latest"
        )

    def test_fetch_latest_version(self):
        session = make_session({"Version": "v1.8.0", "Time": "2024-01-01T00:00:00Z"})
        client = ModuleProxyClient(timeout=5, session=session)

        assert client.fetch_latest_version("github.com/spf13/cobra") == "v1.8.0"
        session.get.assert_called_once_with(
            "https://proxy.golang.org/github.com/spf13/cobra/@latest", timeout=5
        )

    def test_get_latest_version_updates_dependency(self):
        client = ModuleProxyClient(session=make_session({"Version": "v1.8.0"}))
        dep = Dependency(name="github.com/spf13/cobra", current_version="v1.7.0")

        client.get_latest_version(dep)

        assert dep.latest_version == "v1.8.0"
        assert dep.update_needed is True

    def test_http_error(self):
        session = make_session(error=requests.ConnectionError("connection refused"))
        client = ModuleProxyClient(session=session)

        with pytest.raises(VersionLookupError, match="Failed to get versions"):
            client.fetch_latest_version("github.com/spf13/cobra")

    def test_status_error(self):
        session = make_session({})
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError(
            "404 Not Found"
        )
        client = ModuleProxyClient(session=session)

        with pytest.raises(VersionLookupError):
            client.fetch_latest_version("github.com/missing/module")

    def test_invalid_json(self):
        client = ModuleProxyClient(session=make_session(json_error=ValueError("bad")))

        with pytest.raises(VersionLookupError, match="Invalid proxy response"):
            client.fetch_latest_version("github.com/spf13/cobra")

    def test_missing_version(self):
        client = ModuleProxyClient(session=make_session({"Time": "2024-01-01"}))

        with pytest.raises(VersionLookupError, match="No versions found"):
            client.fetch_latest_version("github.com/spf13/cobra")
