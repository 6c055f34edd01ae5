"""
Exception types raised by the monument search layer.

Storage and configuration problems propagate to the caller unchanged;
nothing in this package retries.
"""

from typing import List, Optional


class DenkmalError(Exception):
    """Base class for all errors raised by denkmal."""
    pass


class StorageError(DenkmalError):
    """Raised when the database cannot be opened or a query fails."""
    pass


class DegenerateInputError(DenkmalError, ValueError):
    """Raised when a score is requested for an empty field value."""
    pass


class ConfigError(DenkmalError):
    """Raised for invalid environment configuration."""
    pass


class DatasetError(DenkmalError):
    """Raised when an import document fails validation."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or f"Invalid dataset: {len(errors)} error(s)")
