"""
Go module proxy client for looking up the latest version of a module.
"""

import requests

from ..shared_utilities import get_logger, trace_function
from ..update_analysis.config import DEFAULT_PROXY_URL
from ..update_analysis.data_models import Dependency
from ..update_analysis.errors import VersionLookupError


def escape_module_path(module_path: str) -> str:
    """Case-encode a module path the way the proxy protocol expects.

    Every upper-case letter becomes ``!`` followed by its lower-case form.
    """
    return "".join(f"!{c.lower()}" if c.isupper() else c for c in module_path)


class ModuleProxyClient:
    """Client for the GOPROXY ``@latest`` endpoint."""

    def __init__(
        self,
        proxy_url: str = DEFAULT_PROXY_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        """Initialize proxy client.

        Args:
            proxy_url: Base URL of the module proxy
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
        """
        self.proxy_url = proxy_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = get_logger(__name__)

    def latest_version_url(self, module_path: str) -> str:
        return f"{self.proxy_url}/{escape_module_path(module_path)}/@latest"

    @trace_function("fetch_latest_version", include_args=True)
    def fetch_latest_version(self, module_path: str) -> str:
        """
        Fetch the latest version the proxy knows for a module.

        Raises:
            VersionLookupError: If the proxy cannot be reached or has no answer
        """
        url = self.latest_version_url(module_path)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise VersionLookupError(
                f"Failed to get versions for {module_path}: {e}"
            ) from e
        except ValueError as e:
            raise VersionLookupError(
                f"Invalid proxy response for {module_path}: {e}"
            ) from e

        version = data.get("Version") if isinstance(data, dict) else None
        if not version:
            raise VersionLookupError(f"No versions found for {module_path}")
        return version

    def get_latest_version(self, dependency: Dependency) -> None:
        """Fill in the latest version and update flag of ``dependency``."""
        latest = self.fetch_latest_version(dependency.name)
        dependency.set_latest_version(latest)
        self.logger.debug(
            f"{dependency.name}: current {dependency.current_version}, "
            f"latest {latest}"
        )
