"""Factory defaults and fixed locations of the settings record."""

from __future__ import annotations

from torrconf.models import RetrackersMode, Settings

SETTINGS_BUCKET = "Settings"
SETTINGS_KEY = "BitTorr"

CACHE_DEFAULTS_VERSION = 1
CACHE_SIZE_DEFAULT = 332 * 1024 * 1024  # 332 MB
PRELOAD_CACHE_DEFAULT = 10
CACHE_DEFAULT_PATH = "/Library/Caches/TorrServerCache"

CONNECTIONS_LIMIT_DEFAULT = 25
TORRENT_DISCONNECT_TIMEOUT_DEFAULT = 30
READER_READ_AHEAD_DEFAULT = 95
READER_READ_AHEAD_MIN = 5
READER_READ_AHEAD_MAX = 100
PRELOAD_CACHE_MIN = 0
PRELOAD_CACHE_MAX = 100

MARKER_DIR_NAME = ".tsc"


def factory_defaults() -> Settings:
    """Build a fresh record with the factory defaults."""
    return Settings(
        cache_size=CACHE_SIZE_DEFAULT,
        preload_cache=PRELOAD_CACHE_DEFAULT,
        use_disk=True,
        torrents_save_path=CACHE_DEFAULT_PATH,
        remove_cache_on_drop=True,
        cache_defaults_version=CACHE_DEFAULTS_VERSION,
        connections_limit=CONNECTIONS_LIMIT_DEFAULT,
        retrackers_mode=RetrackersMode.ADD.value,
        torrent_disconnect_timeout=TORRENT_DISCONNECT_TIMEOUT_DEFAULT,
        reader_read_ahead=READER_READ_AHEAD_DEFAULT,
        responsive_mode=True,
        show_fs_active_torr=True,
        store_settings_in_json=True,
    )
