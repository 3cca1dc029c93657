"""Advisory lock on the settings database file."""

from __future__ import annotations

import contextlib
import logging
import sys
import time
from pathlib import Path
from typing import IO

from torrconf.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class FileLock:
    """Exclusive lock held on a sidecar file for the lifetime of the store.

    The lock is taken with a bounded wait so that a stale lock left behind on
    a sandboxed filesystem never hangs startup.
    """

    def __init__(self, lock_path: Path | str, timeout: float = 1.5):
        """Initialize the lock.

        Args:
            lock_path: Path of the lock file (created if missing)
            timeout: Seconds to wait before giving up

        """
        self.lock_path = Path(lock_path)
        self.timeout = timeout
        self._fh: IO[str] | None = None

    @property
    def locked(self) -> bool:
        """Whether this instance currently holds the lock."""
        return self._fh is not None

    def acquire(self) -> None:
        """Take the lock or raise LockTimeoutError."""
        if self._fh is not None:
            return
        fh = open(self.lock_path, "a+")  # noqa: SIM115
        deadline = time.monotonic() + self.timeout
        while True:
            if self._try_lock(fh):
                self._fh = fh
                logger.debug("Acquired lock %s", self.lock_path)
                return
            if time.monotonic() >= deadline:
                fh.close()
                msg = f"Timeout acquiring lock: {self.lock_path}"
                raise LockTimeoutError(msg, {"timeout": self.timeout})
            time.sleep(_POLL_INTERVAL)

    def release(self) -> None:
        """Release the lock. Safe to call more than once."""
        if self._fh is None:
            return
        try:
            if sys.platform == "win32":
                import msvcrt

                with contextlib.suppress(OSError):
                    msvcrt.locking(self._fh.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                import fcntl

                fcntl.flock(self._fh.fileno(), fcntl.LOCK_UN)
        finally:
            self._fh.close()
            self._fh = None
            logger.debug("Released lock %s", self.lock_path)

    @staticmethod
    def _try_lock(fh: IO[str]) -> bool:
        try:
            if sys.platform == "win32":
                import msvcrt

                msvcrt.locking(fh.fileno(), msvcrt.LK_NBLCK, 1)
            else:
                import fcntl

                fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            return False
        return True

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
