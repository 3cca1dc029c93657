"""Pytest configuration and shared fixtures for torrconf tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from torrconf import logging_config
from torrconf.config.manager import SettingsManager, shutdown_settings
from torrconf.models import StoreOptions
from torrconf.storage.store import SettingsStore


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("integration", "marks tests as integration tests"),
        ("storage", "marks tests as storage tests"),
        ("config", "marks tests as settings management tests"),
        ("cli", "marks tests as CLI tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Undo logging configuration so each test sees default propagation."""
    yield
    package_logger = logging.getLogger(logging_config.PACKAGE_LOGGER)
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    logging_config._level_before_debug = None  # noqa: SLF001


@pytest.fixture(autouse=True)
def cleanup_singletons():
    """Close the process-wide store and drop the global manager."""
    yield
    shutdown_settings()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Runtime data directory (not created yet)."""
    return tmp_path / "data"


@pytest.fixture
def store_options(data_dir: Path) -> StoreOptions:
    """Store options with a short lock timeout."""
    return StoreOptions(data_dir=data_dir, lock_timeout=0.2)


@pytest.fixture
def store(store_options: StoreOptions):
    """An open store outside the process-wide singleton."""
    db = SettingsStore.open(store_options)
    yield db
    db.close()


@pytest.fixture
def manager(store: SettingsStore) -> SettingsManager:
    """Writable settings manager over a fresh store."""
    return SettingsManager(store)
