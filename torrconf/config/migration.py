"""Versioned migration of stored settings records.

Each record carries ``CacheDefaultsVersion``. When it is older than the
current version, the registered steps run in order, each bringing the record
up by one version. Steps are idempotent and only ever overwrite fields.
"""

from __future__ import annotations

import logging
from typing import Callable, ClassVar

from torrconf.config.defaults import (
    CACHE_DEFAULT_PATH,
    CACHE_DEFAULTS_VERSION,
    CACHE_SIZE_DEFAULT,
    PRELOAD_CACHE_DEFAULT,
)
from torrconf.models import Settings

logger = logging.getLogger(__name__)


class SettingsMigrator:
    """Settings migration system."""

    CURRENT_VERSION: ClassVar[int] = CACHE_DEFAULTS_VERSION

    # Migration registry: source version -> step name
    MIGRATIONS: ClassVar[dict[int, str]] = {
        0: "_migrate_0_to_1",
    }

    @classmethod
    def needs_migration(cls, sets: Settings) -> bool:
        """Whether ``sets`` is older than the current version."""
        return sets.cache_defaults_version < cls.CURRENT_VERSION

    @classmethod
    def migrate(cls, sets: Settings) -> tuple[bool, list[str]]:
        """Bring ``sets`` up to the current version, in place.

        Args:
            sets: Loaded settings record

        Returns:
            Tuple of (mutated, migration_log)

        """
        if not cls.needs_migration(sets):
            return False, []

        migration_log = [
            f"Migrating from {sets.cache_defaults_version} to {cls.CURRENT_VERSION}"
        ]
        version = max(sets.cache_defaults_version, 0)
        while version < cls.CURRENT_VERSION:
            step_name = cls.MIGRATIONS.get(version)
            if step_name is not None:
                step: Callable[[Settings], None] = getattr(cls, step_name)
                step(sets)
                migration_log.append(f"Migration {step_name} completed")
            version += 1

        sets.cache_defaults_version = cls.CURRENT_VERSION
        return True, migration_log

    @staticmethod
    def _migrate_0_to_1(sets: Settings) -> None:
        """Reset the cache fields to the version 1 defaults."""
        sets.cache_size = CACHE_SIZE_DEFAULT
        sets.preload_cache = PRELOAD_CACHE_DEFAULT
        sets.use_disk = True
        sets.torrents_save_path = CACHE_DEFAULT_PATH
        sets.remove_cache_on_drop = True
        logger.info("Applied cache defaults migration")


def apply_cache_defaults_migration(sets: Settings) -> bool:
    """Migrate ``sets`` in place; return whether it changed."""
    mutated, migration_log = SettingsMigrator.migrate(sets)
    for line in migration_log:
        logger.debug(line)
    return mutated
