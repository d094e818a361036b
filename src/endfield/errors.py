"""Exceptions raised by endfield entry points that do not return result objects."""


class EndfieldError(Exception):
    """Base class for endfield failures."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ReplicaPatchError(EndfieldError):
    """Raised when a replica count cannot be rewritten in place."""


class LayoutNotFoundError(EndfieldError):
    """Raised when a project has no saved layout."""


class ConfigurationError(EndfieldError):
    """Raised when project settings cannot be loaded or validated."""
