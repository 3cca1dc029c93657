"""Settings database: bucket-addressed key-value storage over LMDB."""

from __future__ import annotations

from torrconf.storage.base import SettingsDB
from torrconf.storage.lock import FileLock
from torrconf.storage.store import (
    SettingsStore,
    close_store,
    get_store,
    open_store,
)

__all__ = [
    "FileLock",
    "SettingsDB",
    "SettingsStore",
    "close_store",
    "get_store",
    "open_store",
]
