"""Invariants applied to every settings record the manager accepts."""

from __future__ import annotations

import logging

from torrconf.config.defaults import (
    CACHE_DEFAULTS_VERSION,
    CACHE_SIZE_DEFAULT,
    CONNECTIONS_LIMIT_DEFAULT,
    PRELOAD_CACHE_MAX,
    PRELOAD_CACHE_MIN,
    READER_READ_AHEAD_MAX,
    READER_READ_AHEAD_MIN,
    TORRENT_DISCONNECT_TIMEOUT_DEFAULT,
)
from torrconf.models import RetrackersMode, Settings

logger = logging.getLogger(__name__)

_RETRACKERS_MODES = frozenset(mode.value for mode in RetrackersMode)


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def apply_invariants(sets: Settings, previous_version: int = 0) -> Settings:
    """Substitute defaults for unset fields and clamp ranges, in place.

    Args:
        sets: Record to normalize
        previous_version: CacheDefaultsVersion of the record being replaced,
            carried over when ``sets`` has none

    Returns:
        The same record, for chaining

    """
    if sets.cache_defaults_version == 0:
        sets.cache_defaults_version = (
            previous_version if previous_version > 0 else CACHE_DEFAULTS_VERSION
        )
    if sets.cache_size == 0:
        sets.cache_size = CACHE_SIZE_DEFAULT
    if sets.connections_limit == 0:
        sets.connections_limit = CONNECTIONS_LIMIT_DEFAULT
    if sets.torrent_disconnect_timeout == 0:
        sets.torrent_disconnect_timeout = TORRENT_DISCONNECT_TIMEOUT_DEFAULT

    sets.reader_read_ahead = clamp(
        sets.reader_read_ahead, READER_READ_AHEAD_MIN, READER_READ_AHEAD_MAX
    )
    sets.preload_cache = clamp(sets.preload_cache, PRELOAD_CACHE_MIN, PRELOAD_CACHE_MAX)

    if sets.retrackers_mode not in _RETRACKERS_MODES:
        logger.debug("Unknown retrackers mode %d, using add", sets.retrackers_mode)
        sets.retrackers_mode = RetrackersMode.ADD.value

    if not sets.torrents_save_path:
        sets.use_disk = False
    return sets
