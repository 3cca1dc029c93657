"""Pydantic models for torrconf.

Provides the persisted settings record and the runtime options injected by
the host process.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticSerializationError

from torrconf.exceptions import SerializationError


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RetrackersMode(IntEnum):
    """How announce lists are rewritten when a torrent is added."""

    NONE = 0  # Leave trackers untouched
    ADD = 1  # Add retrackers
    REMOVE = 2  # Remove retrackers
    REPLACE = 3  # Replace trackers with retrackers


class TorznabConfig(BaseModel):
    """Torznab search endpoint."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    host: str = Field(default="", alias="Host")
    key: str = Field(default="", alias="Key")
    name: str = Field(default="", alias="Name")


class Settings(BaseModel):
    """Server tunables persisted at ``Settings/BitTorr``.

    Attributes are snake_case; the stored JSON keeps the historical CamelCase
    field names through aliases. Every field defaults to its zero value so
    that records written by older versions load with the missing fields
    zeroed. Fields this model does not know about are kept as extras and
    written back unchanged.
    """

    model_config = {"populate_by_name": True, "extra": "allow"}

    # Cache
    cache_size: int = Field(default=0, alias="CacheSize", description="Cache size in bytes")
    reader_read_ahead: int = Field(
        default=0,
        alias="ReaderReadAHead",
        description="Reader read-ahead in percent of the cache (5-100)",
    )
    preload_cache: int = Field(
        default=0, alias="PreloadCache", description="Preload in percent of the cache"
    )
    cache_defaults_version: int = Field(
        default=0,
        alias="CacheDefaultsVersion",
        description="Cache defaults migration marker",
    )

    # Disk
    use_disk: bool = Field(default=False, alias="UseDisk")
    torrents_save_path: str = Field(default="", alias="TorrentsSavePath")
    remove_cache_on_drop: bool = Field(default=False, alias="RemoveCacheOnDrop")

    # Torrent
    force_encrypt: bool = Field(default=False, alias="ForceEncrypt")
    retrackers_mode: int = Field(
        default=0,
        alias="RetrackersMode",
        description="0 - don't add, 1 - add retrackers, 2 - remove, 3 - replace",
    )
    torrent_disconnect_timeout: int = Field(
        default=0, alias="TorrentDisconnectTimeout", description="In seconds"
    )
    enable_debug: bool = Field(default=False, alias="EnableDebug")

    # DLNA
    enable_dlna: bool = Field(default=False, alias="EnableDLNA")
    friendly_name: str = Field(default="", alias="FriendlyName")

    # Search
    enable_rutor_search: bool = Field(default=False, alias="EnableRutorSearch")
    enable_torznab_search: bool = Field(default=False, alias="EnableTorznabSearch")
    torznab_urls: list[TorznabConfig] = Field(default_factory=list, alias="TorznabUrls")

    # BitTorrent
    enable_ipv6: bool = Field(default=False, alias="EnableIPv6")
    disable_tcp: bool = Field(default=False, alias="DisableTCP")
    disable_utp: bool = Field(default=False, alias="DisableUTP")
    disable_upnp: bool = Field(default=False, alias="DisableUPNP")
    disable_dht: bool = Field(default=False, alias="DisableDHT")
    disable_pex: bool = Field(default=False, alias="DisablePEX")
    disable_upload: bool = Field(default=False, alias="DisableUpload")
    download_rate_limit: int = Field(
        default=0, alias="DownloadRateLimit", description="KiB/s, 0 - unlimited"
    )
    upload_rate_limit: int = Field(
        default=0, alias="UploadRateLimit", description="KiB/s, 0 - unlimited"
    )
    connections_limit: int = Field(default=0, alias="ConnectionsLimit")
    peers_listen_port: int = Field(default=0, alias="PeersListenPort")

    # HTTPS
    ssl_port: int = Field(default=0, alias="SslPort")
    ssl_cert: str = Field(default="", alias="SslCert")
    ssl_key: str = Field(default="", alias="SslKey")

    # Reader
    responsive_mode: bool = Field(
        default=False,
        alias="ResponsiveMode",
        description="Serve reads without waiting for piece completion",
    )

    # FS
    show_fs_active_torr: bool = Field(default=False, alias="ShowFSActiveTorr")

    # Storage preferences
    store_settings_in_json: bool = Field(default=False, alias="StoreSettingsInJson")
    store_viewed_in_json: bool = Field(default=False, alias="StoreViewedInJson")

    @field_validator("torznab_urls", mode="before")
    @classmethod
    def validate_torznab_urls(cls, v: Any) -> Any:
        """Read a null list as empty."""
        return [] if v is None else v

    def to_json(self) -> bytes:
        """Encode the record with its on-disk field names."""
        try:
            return self.model_dump_json(by_alias=True).encode("utf-8")
        except PydanticSerializationError as e:
            msg = f"Cannot encode settings: {e}"
            raise SerializationError(msg) from e

    @classmethod
    def from_json(cls, data: bytes | str) -> Settings:
        """Decode a stored record."""
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            msg = "Cannot decode settings"
            raise SerializationError(msg, {"errors": e.error_count()}) from e

    def __str__(self) -> str:
        """Return the JSON form of the record."""
        return self.to_json().decode("utf-8")


class StoreOptions(BaseModel):
    """Location and engine options of the settings database."""

    data_dir: Path = Field(description="Runtime data directory")
    db_name: str = Field(default="config.db", description="Database file name")
    lock_timeout: float = Field(
        default=1.5,
        gt=0,
        le=60.0,
        description="Seconds to wait for the database lock",
    )
    map_size: int = Field(
        default=32 * 1024 * 1024,
        ge=1024 * 1024,
        description="Initial LMDB map size in bytes",
    )

    @property
    def db_path(self) -> Path:
        """Full path of the database file."""
        return self.data_dir / self.db_name


class LoggingOptions(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(default=None, description="Log file path")
    structured_logging: bool = Field(
        default=False, description="Emit JSON lines instead of rich console output"
    )
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s.%(funcName)s: %(message)s",
        description="Log format string for file output",
    )


class RuntimeOptions(BaseModel):
    """Options injected by the host process at startup."""

    store: StoreOptions
    logging: LoggingOptions = Field(default_factory=LoggingOptions)
    read_only: bool = Field(default=False, description="Never write settings to the store")
