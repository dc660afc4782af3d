"""
Exceptions raised by the Chronicle build pipeline.

Missing or malformed content never raises; it degrades to a fallback
rendering. Only faults that make the build impossible end up here.
"""


class BuildError(Exception):
    """Base class for errors that abort a build."""


class OutputError(BuildError):
    """Raised when a page cannot be written to the output tree."""

    def __init__(self, path, reason):
        # Keep both values in args so the error survives pickling across worker processes
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def __str__(self):
        return f"Failed to write {self.path}: {self.reason}"


class ConfigError(BuildError):
    """Raised when settings are present but unusable."""
