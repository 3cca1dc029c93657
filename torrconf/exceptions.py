"""Exception hierarchy for torrconf.

These errors are raised inside the package and handled at its boundary:
the store and the settings manager are fail-soft towards their callers.
"""

from __future__ import annotations

from typing import Any


class TorrConfError(Exception):
    """Base exception for all torrconf errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize torrconf error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class StoreError(TorrConfError):
    """Settings database errors."""


class StoreOpenError(StoreError):
    """The settings database could not be opened."""


class LockTimeoutError(StoreOpenError):
    """The advisory lock on the database was not acquired in time."""


class SettingsError(TorrConfError):
    """Settings record errors."""


class SerializationError(SettingsError):
    """Settings record could not be encoded or decoded."""
