"""
Mapping of Go module paths to clone URLs.
"""

from dataclasses import dataclass

KNOWN_HOST_PREFIXES = ("github.com/", "gitlab.com/", "bitbucket.org/")
GOPKG_PREFIX = "gopkg.in/"


@dataclass(frozen=True)
class RepositoryLocation:
    """Clone URL for a module, and whether it is only a guess."""

    module_path: str
    url: str
    best_guess: bool = False


def _gopkg_location(module_path: str) -> str | None:
    """Rewrite gopkg.in redirect paths to their GitHub repositories.

    gopkg.in/pkg.v3 lives at github.com/go-pkg/pkg and
    gopkg.in/user/pkg.v3 lives at github.com/user/pkg.
    """
    parts = module_path.split("/")
    if len(parts) == 2:
        pkg_parts = parts[1].split(".")
        if len(pkg_parts) >= 2 and pkg_parts[0]:
            pkg = pkg_parts[0]
            return f"https://github.com/go-{pkg}/{pkg}.git"
    elif len(parts) >= 3:
        pkg_parts = parts[2].split(".")
        if len(pkg_parts) >= 2 and pkg_parts[0] and parts[1]:
            return f"https://github.com/{parts[1]}/{pkg_parts[0]}.git"
    return None


def resolve_location(module_path: str) -> RepositoryLocation:
    """Work out where a module's source repository can be cloned from.

    Never fails: unknown hosts get ``https://<module_path>.git`` with
    ``best_guess`` set so the caller can report the degraded result.
    """
    if module_path.startswith(KNOWN_HOST_PREFIXES):
        return RepositoryLocation(module_path, f"https://{module_path}.git")

    if module_path.startswith(GOPKG_PREFIX):
        url = _gopkg_location(module_path)
        if url:
            return RepositoryLocation(module_path, url)

    return RepositoryLocation(module_path, f"https://{module_path}.git", best_guess=True)


class RepositoryLocator:
    """Locates the remote repository behind a module path."""

    def locate(self, module_path: str) -> str:
        """Return the clone URL for ``module_path``."""
        return resolve_location(module_path).url

    def locate_with_status(self, module_path: str) -> RepositoryLocation:
        return resolve_location(module_path)
