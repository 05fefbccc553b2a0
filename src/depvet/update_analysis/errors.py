"""
Exceptions raised by the update analysis pipeline.
"""


class UpdateAnalysisError(Exception):
    """Base exception for update analysis operations."""

    pass


class ConfigError(UpdateAnalysisError):
    """Configuration could not be loaded or is invalid."""

    pass


class GitCommandError(UpdateAnalysisError):
    """A git subprocess failed or timed out."""

    def __init__(self, args: list[str], message: str, returncode: int | None = None):
        self.command = args
        self.returncode = returncode
        super().__init__(f"git {' '.join(args)}: {message}")


class WorkspaceError(UpdateAnalysisError):
    """The disposable working copy could not be prepared."""

    pass


class HistoryExtractionError(UpdateAnalysisError):
    """Commit history could not be read at all."""

    pass


class ManifestError(UpdateAnalysisError):
    """The project manifest could not be read."""

    pass


class VersionLookupError(UpdateAnalysisError):
    """The latest version of a dependency could not be determined."""

    pass


class UpdateApplyError(UpdateAnalysisError):
    """Applying an approved update to the project failed."""

    pass
