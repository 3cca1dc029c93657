"""Settings management.

This package handles loading, validation, defaults and migration of the
persisted settings record.
"""

from __future__ import annotations

from torrconf.config.defaults import factory_defaults
from torrconf.config.manager import (
    SettingsManager,
    get_manager,
    get_settings,
    init_settings,
    shutdown_settings,
)
from torrconf.config.migration import SettingsMigrator
from torrconf.config.probe import find_marker_dir
from torrconf.config.validation import apply_invariants

__all__ = [
    "SettingsManager",
    "SettingsMigrator",
    "apply_invariants",
    "factory_defaults",
    "find_marker_dir",
    "get_manager",
    "get_settings",
    "init_settings",
    "shutdown_settings",
]
