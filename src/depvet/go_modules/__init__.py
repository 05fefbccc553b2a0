"""
Go module collaborators: manifest reading, version lookup and updating.
"""

from .manifest import GoModReader, parse_go_mod
from .proxy_client import ModuleProxyClient, escape_module_path
from .updater import GoModuleUpdater

__all__ = [
    "GoModReader",
    "GoModuleUpdater",
    "ModuleProxyClient",
    "escape_module_path",
    "parse_go_mod",
]
