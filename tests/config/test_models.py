"""Tests for the settings record and runtime option models."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from torrconf.config.defaults import factory_defaults
from torrconf.exceptions import SerializationError
from torrconf.models import (
    LoggingOptions,
    LogLevel,
    RetrackersMode,
    RuntimeOptions,
    Settings,
    StoreOptions,
    TorznabConfig,
)

pytestmark = [pytest.mark.unit, pytest.mark.config]


class TestSettingsSerialization:
    """Test the stored JSON form."""

    def test_uses_stored_field_names(self):
        data = json.loads(factory_defaults().to_json())
        assert data["CacheSize"] == 332 * 1024 * 1024
        assert data["ReaderReadAHead"] == 95
        assert data["ShowFSActiveTorr"] is True
        assert data["TorznabUrls"] == []
        assert "cache_size" not in data

    def test_decode_stored_record(self):
        raw = json.dumps(
            {
                "CacheSize": 1024,
                "UseDisk": True,
                "TorrentsSavePath": "/tmp/cache",
                "TorznabUrls": [{"Host": "http://jackett", "Key": "k", "Name": "j"}],
                "EnableIPv6": True,
                "SslPort": 8091,
            }
        )
        sets = Settings.from_json(raw)
        assert sets.cache_size == 1024
        assert sets.use_disk is True
        assert sets.torrents_save_path == "/tmp/cache"
        assert sets.torznab_urls == [TorznabConfig(host="http://jackett", key="k", name="j")]
        assert sets.enable_ipv6 is True
        assert sets.ssl_port == 8091

    def test_missing_fields_take_zero_values(self):
        sets = Settings.from_json(b"{}")
        assert sets.cache_size == 0
        assert sets.reader_read_ahead == 0
        assert sets.use_disk is False
        assert sets.torrents_save_path == ""
        assert sets.torznab_urls == []

    def test_null_torznab_list(self):
        sets = Settings.from_json(b'{"TorznabUrls": null}')
        assert sets.torznab_urls == []

    def test_unknown_fields_round_trip(self):
        raw = b'{"CacheSize": 5, "FutureOption": {"a": [1, 2]}, "NewFlag": true}'
        sets = Settings.from_json(raw)
        data = json.loads(sets.to_json())
        assert data["FutureOption"] == {"a": [1, 2]}
        assert data["NewFlag"] is True
        assert data["CacheSize"] == 5

    def test_unknown_torznab_fields_round_trip(self):
        raw = b'{"TorznabUrls": [{"Host": "h", "Categories": "2000"}]}'
        data = json.loads(Settings.from_json(raw).to_json())
        assert data["TorznabUrls"][0]["Categories"] == "2000"

    def test_round_trip_is_stable(self):
        sets = factory_defaults()
        sets.torznab_urls = [TorznabConfig(host="h", key="k", name="n")]
        encoded = sets.to_json()
        assert Settings.from_json(encoded).to_json() == encoded
        assert Settings.from_json(encoded) == sets

    @pytest.mark.parametrize(
        "raw",
        [b"", b"not json", b"null", b"[]", b'{"CacheSize": "lots"}', b'{"UseDisk": [1]}'],
    )
    def test_decode_errors(self, raw):
        with pytest.raises(SerializationError):
            Settings.from_json(raw)

    def test_str_is_json(self):
        sets = factory_defaults()
        assert json.loads(str(sets))["TorrentsSavePath"] == "/Library/Caches/TorrServerCache"

    def test_populate_by_attribute_name(self):
        assert Settings(cache_size=7).cache_size == 7
        assert Settings(CacheSize=7).cache_size == 7


class TestRetrackersMode:
    """Test retrackers mode values."""

    def test_values(self):
        assert [m.value for m in RetrackersMode] == [0, 1, 2, 3]


class TestRuntimeOptions:
    """Test runtime options."""

    def test_store_defaults(self, tmp_path):
        options = StoreOptions(data_dir=tmp_path)
        assert options.db_name == "config.db"
        assert options.lock_timeout == 1.5
        assert options.db_path == tmp_path / "config.db"

    def test_lock_timeout_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            StoreOptions(data_dir=tmp_path, lock_timeout=0)

    def test_runtime_defaults(self, tmp_path):
        options = RuntimeOptions(store=StoreOptions(data_dir=str(tmp_path)))
        assert isinstance(options.store.data_dir, Path)
        assert options.read_only is False
        assert options.logging == LoggingOptions()
        assert options.logging.log_level is LogLevel.INFO
