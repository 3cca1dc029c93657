"""LMDB-backed settings database.

Buckets are not native to LMDB, so the store keeps one flat keyspace and
addresses an entry by ``b"<bucket path>\\x00<name>"``. Bucket path components
are joined with ``/`` and may contain neither ``/`` nor NUL, which keeps the
entries of one bucket contiguous and apart from those of its sub-buckets.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from pathlib import Path
from typing import Callable

import lmdb

from torrconf.exceptions import StoreOpenError
from torrconf.models import StoreOptions
from torrconf.storage.base import SettingsDB
from torrconf.storage.lock import FileLock

logger = logging.getLogger(__name__)

_SEPARATOR = b"\x00"
MAP_SIZE_MAX = 1024 * 1024 * 1024

# Process-wide store
_store: SettingsStore | None = None
_store_lock = threading.Lock()


def lock_path_for(db_path: Path) -> Path:
    """Path of the advisory lock sidecar for ``db_path``."""
    return db_path.with_name(db_path.name + ".lock")


def bucket_prefix(path: str) -> bytes | None:
    """Encode a bucket path as a key prefix, or None if the path is invalid."""
    parts = path.split("/")
    if any(not part or "\x00" in part for part in parts):
        return None
    try:
        return "/".join(parts).encode("utf-8") + _SEPARATOR
    except UnicodeEncodeError:
        return None


class SettingsStore(SettingsDB):
    """Transactional, path-addressed key-value store over one LMDB file."""

    def __init__(self, env: lmdb.Environment, lock: FileLock, db_path: Path):
        """Wrap an open environment. Use :meth:`open` instead."""
        self.db_path = db_path
        self._env: lmdb.Environment | None = env
        self._lock = lock

    @classmethod
    def open(cls, options: StoreOptions) -> SettingsStore:
        """Lock and open the database file described by ``options``.

        Raises:
            StoreOpenError: The directory, the lock or the file is unusable.

        """
        db_path = options.db_path
        lock = FileLock(lock_path_for(db_path), timeout=options.lock_timeout)
        try:
            options.data_dir.mkdir(parents=True, exist_ok=True)
            lock.acquire()
        except OSError as e:
            msg = f"Cannot lock {db_path}: {e}"
            raise StoreOpenError(msg) from e

        try:
            env = lmdb.open(
                str(db_path),
                map_size=options.map_size,
                subdir=False,
                max_dbs=0,
                lock=True,
                create=True,
            )
        except lmdb.Error as e:
            lock.release()
            msg = f"Cannot open {db_path}: {e}"
            raise StoreOpenError(msg) from e

        logger.debug("Opened settings database %s", db_path)
        return cls(env, lock, db_path)

    @property
    def closed(self) -> bool:
        """Whether the store has been closed."""
        return self._env is None

    def close(self) -> None:
        """Close the environment and release the lock. Idempotent."""
        if self._env is not None:
            self._env.close()
            self._env = None
            logger.debug("Closed settings database %s", self.db_path)
        self._lock.release()

    def get(self, path: str, name: str) -> bytes | None:
        """Return a copy of the value stored under ``path``/``name``."""
        env = self._require_env("get")
        key = self._entry_key(path, name)
        if env is None or key is None:
            return None
        try:
            with env.begin(buffers=True) as txn:
                data = txn.get(key)
                if data is None:
                    return None
                # The buffer points into the map and dies with the transaction
                return bytes(data)
        except lmdb.Error as e:
            logger.warning("Error get sets %s/%s, error: %s", path, name, e)
            return None

    def set(self, path: str, name: str, value: bytes) -> None:
        """Store ``value`` under ``path``/``name``."""
        key = self._entry_key(path, name)
        if key is None:
            logger.warning("Ignoring put to invalid path %r name %r", path, name)
            return

        def put(txn: lmdb.Transaction) -> None:
            txn.put(key, bytes(value))

        self._write("put", f"{path}/{name}", put)

    def list_keys(self, path: str) -> list[str]:
        """Return the keys of the bucket at ``path`` in key order."""
        env = self._require_env("list")
        prefix = bucket_prefix(path)
        if env is None or prefix is None:
            return []
        names: list[str] = []
        try:
            with env.begin() as txn:
                names = [
                    key[len(prefix) :].decode("utf-8", errors="replace")
                    for key in self._scan(txn, prefix)
                ]
        except lmdb.Error as e:
            logger.warning("Error list sets %s, error: %s", path, e)
            return []
        return names

    def remove(self, path: str, name: str) -> None:
        """Delete ``path``/``name`` if present."""
        key = self._entry_key(path, name)
        if key is None:
            return

        def delete(txn: lmdb.Transaction) -> None:
            txn.delete(key)

        self._write("rem", f"{path}/{name}", delete)

    def clear(self, path: str) -> None:
        """Delete every key of the bucket at ``path``; sub-buckets are kept."""
        prefix = bucket_prefix(path)
        if prefix is None:
            return

        def delete_all(txn: lmdb.Transaction) -> None:
            for key in self._scan(txn, prefix):
                txn.delete(key)

        self._write("clear", path, delete_all)

    def _require_env(self, op: str) -> lmdb.Environment | None:
        if self._env is None:
            logger.warning("Settings database %s is closed (%s)", self.db_path, op)
        return self._env

    @staticmethod
    def _entry_key(path: str, name: str) -> bytes | None:
        prefix = bucket_prefix(path)
        if prefix is None or not name:
            return None
        try:
            return prefix + name.encode("utf-8")
        except UnicodeEncodeError:
            return None

    @staticmethod
    def _scan(txn: lmdb.Transaction, prefix: bytes) -> list[bytes]:
        """Keys under ``prefix``, skipping the empty name."""
        keys: list[bytes] = []
        with txn.cursor() as cur:
            if not cur.set_range(prefix):
                return keys
            for key in cur.iternext(keys=True, values=False):
                key = bytes(key)
                if not key.startswith(prefix):
                    break
                if len(key) > len(prefix):
                    keys.append(key)
        return keys

    def _write(
        self, op: str, target: str, fn: Callable[[lmdb.Transaction], None]
    ) -> None:
        env = self._require_env(op)
        if env is None:
            return
        try:
            try:
                with env.begin(write=True) as txn:
                    fn(txn)
            except lmdb.MapFullError:
                self._grow_map(env)
                with env.begin(write=True) as txn:
                    fn(txn)
        except lmdb.Error as e:
            logger.warning("Error %s sets %s, error: %s", op, target, e)

    @staticmethod
    def _grow_map(env: lmdb.Environment) -> None:
        current = int(env.info().get("map_size", 0) or 0)
        new = min(current * 2, MAP_SIZE_MAX)
        if new > current:
            env.set_mapsize(new)
            logger.info("Grew settings database map to %d bytes", new)


def _recover(options: StoreOptions) -> SettingsStore | None:
    """Move a broken or stale-locked database aside and start empty."""
    db_path = options.db_path
    for stale in (lock_path_for(db_path), db_path.with_name(db_path.name + "-lock")):
        with contextlib.suppress(OSError):
            stale.unlink()

    recovered_path = db_path.with_name(f"{db_path.name}.bak.{int(time.time())}")
    if db_path.exists():
        try:
            db_path.rename(recovered_path)
            logger.warning("Renamed broken database to %s", recovered_path)
        except OSError as e:
            logger.warning("Cannot move %s aside: %s", db_path.name, e)

    try:
        store = SettingsStore.open(options)
    except StoreOpenError as e:
        logger.error("Failed to recreate %s: %s", db_path.name, e)
        return None
    logger.info("Recreated empty %s", db_path.name)
    return store


def open_store(options: StoreOptions) -> SettingsStore | None:
    """Open the process-wide store, or return the one already open.

    Returns:
        The store, or None when neither the database nor its recovery could
        be opened; callers then treat settings as absent.

    """
    global _store
    with _store_lock:
        if _store is not None and not _store.closed:
            return _store
        try:
            store = SettingsStore.open(options)
        except StoreOpenError as e:
            logger.warning("Settings database open failed: %s", e)
            store = _recover(options)
        _store = store
        return _store


def get_store() -> SettingsStore | None:
    """Return the process-wide store if it is open."""
    return _store


def close_store() -> None:
    """Close the process-wide store."""
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
        _store = None
