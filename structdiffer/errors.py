"""
structdiffer.errors — Fatal conditions raised while comparing.

Every error here is a programmer-error signal: it aborts the whole
comparison, and whatever was recorded before the abort should not be
trusted.  Genuine value disagreements never raise; they become Diffs.
"""

from typing import Optional


class DifferError(Exception):
    """Base class for everything raised by structdiffer."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path is not None:
            message = f"{message} (at {path})"
        super().__init__(message)


class TypeMismatchError(DifferError, TypeError):
    """The two sides do not share a declared type at some position."""


class DepthExceededError(DifferError):
    """Traversal went deeper than the configured limit."""


class InvalidValueError(DifferError):
    """One side of a position is absent when a value was expected."""


class UnsupportedValueError(DifferError, TypeError):
    """A dynamic value holds something other than str/number/bool/list/dict."""


class ProtocolViolationError(DifferError):
    """A custom comparator broke its contract."""


class ConfigurationError(DifferError, ValueError):
    """Bad pattern or template handed to the builder."""
