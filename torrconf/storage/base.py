"""Abstract interface of the settings database."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SettingsDB(ABC):
    """Path-addressed key-value storage used by the settings manager.

    A path is a slash-delimited sequence of bucket names; values live under a
    name inside the terminal bucket. Implementations are fail-soft: errors are
    logged and reads report absence.
    """

    @abstractmethod
    def get(self, path: str, name: str) -> bytes | None:
        """Return a copy of the value stored under ``path``/``name``."""

    @abstractmethod
    def set(self, path: str, name: str, value: bytes) -> None:
        """Store ``value``, creating the buckets of ``path`` as needed."""

    @abstractmethod
    def list_keys(self, path: str) -> list[str]:
        """Return the keys (not sub-buckets) of the bucket at ``path``."""

    @abstractmethod
    def remove(self, path: str, name: str) -> None:
        """Delete one key if present."""

    @abstractmethod
    def clear(self, path: str) -> None:
        """Delete every key of the bucket at ``path``."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying database."""
