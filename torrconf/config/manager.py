"""Settings manager for torrconf.

Owns the published settings record: loads it from the settings database,
installs factory defaults when it is missing or unreadable, migrates old
records, and validates and persists replacements submitted at runtime.
"""

from __future__ import annotations

import logging
import threading

from torrconf.config.defaults import (
    READER_READ_AHEAD_MIN,
    SETTINGS_BUCKET,
    SETTINGS_KEY,
    factory_defaults,
)
from torrconf.config.migration import apply_cache_defaults_migration
from torrconf.config.probe import find_marker_dir
from torrconf.config.validation import apply_invariants
from torrconf.exceptions import SerializationError
from torrconf.logging_config import set_debug_logging
from torrconf.models import RuntimeOptions, Settings
from torrconf.storage.base import SettingsDB
from torrconf.storage.store import close_store, open_store

logger = logging.getLogger(__name__)

# Global settings manager
_manager: SettingsManager | None = None


class SettingsManager:
    """Load, validate, migrate and persist the settings record."""

    def __init__(self, store: SettingsDB | None, read_only: bool = False):
        """Initialize the manager.

        Args:
            store: Settings database, or None when it could not be opened
            read_only: Keep every change in memory only

        """
        self.store = store
        self.read_only = read_only
        self._settings: Settings | None = None
        self._probe_thread: threading.Thread | None = None

    @property
    def settings(self) -> Settings:
        """The published record (factory defaults before the first load)."""
        if self._settings is None:
            self._settings = factory_defaults()
        return self._settings

    @property
    def persistent(self) -> bool:
        """Whether changes reach the settings database."""
        return self.store is not None and not self.read_only

    def load(self) -> Settings:
        """Load the stored record, falling back to factory defaults."""
        buf = self.store.get(SETTINGS_BUCKET, SETTINGS_KEY) if self.store else None
        if not buf:
            self.reset_defaults()
            return self.settings

        try:
            sets = Settings.from_json(buf)
        except SerializationError as e:
            logger.error("Error unmarshal btsets: %s", e)
            self.reset_defaults()
            return self.settings

        if sets.reader_read_ahead < READER_READ_AHEAD_MIN:
            sets.reader_read_ahead = READER_READ_AHEAD_MIN
        migrated = apply_cache_defaults_migration(sets)
        apply_invariants(sets)
        self._publish(sets)
        if migrated:
            self.replace(sets)
        return self.settings

    def replace(self, sets: Settings) -> Settings:
        """Validate ``sets`` and make it the published record.

        The submitted object is copied, never published as is. When disk
        caching is enabled, a background probe may later point
        TorrentsSavePath at a ``.tsc`` directory found under the save path.
        """
        sets = sets.model_copy(deep=True)
        previous_version = (
            self._settings.cache_defaults_version if self._settings is not None else 0
        )
        apply_invariants(sets, previous_version)
        self._publish(sets)

        # Encoded before the probe starts: the stored record keeps the
        # configured save path, the marker only overrides it in memory.
        buf = self._encode(sets) if self.persistent else None
        if sets.use_disk:
            self._start_probe(sets.torrents_save_path)
        if buf is not None:
            self._save(buf)
        return sets

    def reset_defaults(self) -> Settings:
        """Publish the factory defaults and persist them."""
        sets = factory_defaults()
        self._publish(sets)
        buf = self._encode(sets) if self.persistent else None
        if buf is not None:
            self._save(buf)
        return sets

    def wait_for_probe(self, timeout: float | None = None) -> bool:
        """Wait for a running marker probe; return True once none is running."""
        thread = self._probe_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _publish(self, sets: Settings) -> None:
        self._settings = sets
        set_debug_logging(sets.enable_debug)

    @staticmethod
    def _encode(sets: Settings) -> bytes | None:
        try:
            return sets.to_json()
        except SerializationError as e:
            logger.error("Error marshal btsets: %s", e)
            return None

    def _save(self, buf: bytes) -> None:
        if self.store is not None:
            self.store.set(SETTINGS_BUCKET, SETTINGS_KEY, buf)

    def _start_probe(self, save_path: str) -> None:
        thread = threading.Thread(
            target=self._probe_cache_dir,
            args=(save_path,),
            name="torrconf-cache-probe",
            daemon=True,
        )
        self._probe_thread = thread
        thread.start()

    def _probe_cache_dir(self, save_path: str) -> None:
        found = find_marker_dir(save_path)
        if found is None:
            return
        # Only mutation of a published record; callers must not replace
        # settings while a probe is running.
        self.settings.torrents_save_path = found
        logger.info('Find directory "%s", use as cache dir', found)


def init_settings(options: RuntimeOptions) -> SettingsManager:
    """Open the settings database and load the global settings."""
    global _manager
    store = open_store(options.store)
    if store is None:
        logger.error("Settings database unavailable, running with in-memory settings")
    _manager = SettingsManager(store, read_only=options.read_only)
    _manager.load()
    return _manager


def get_manager() -> SettingsManager | None:
    """Get the global settings manager, if initialized."""
    return _manager


def get_settings() -> Settings:
    """Get the published settings record."""
    if _manager is None:
        return factory_defaults()
    return _manager.settings


def shutdown_settings(probe_timeout: float = 1.0) -> None:
    """Drop the global manager and close the settings database."""
    global _manager
    if _manager is not None:
        _manager.wait_for_probe(probe_timeout)
    _manager = None
    close_store()
