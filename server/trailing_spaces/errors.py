"""
Errors raised by the trailing spaces engine.

Ignored documents are not errors: they produce an empty result.
"""

from typing import Optional


class TrailingSpacesError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(TrailingSpacesError):
    """A required setting is missing or has the wrong type."""

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"Did not expect undefined config: {key}")


class InvalidPatternError(TrailingSpacesError):
    """The configured ``regexp`` does not compile."""

    def __init__(self, pattern: str, error: Exception):
        self.pattern = pattern
        self.error = error
        super().__init__(f"Invalid trailing spaces regexp {pattern!r}: {error}")


class SnapshotError(TrailingSpacesError):
    """The on-disk snapshot of a document could not be read."""

    def __init__(self, path: str, error: Exception):
        self.path = path
        self.error = error
        super().__init__(f"Could not read saved copy of {path}: {error}")
