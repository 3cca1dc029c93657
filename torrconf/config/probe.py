"""Lookup of the cache marker directory under the save path."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from torrconf.config.defaults import MARKER_DIR_NAME

logger = logging.getLogger(__name__)


def _is_marker(name: str) -> bool:
    return name.lower() == MARKER_DIR_NAME


def _sorted_subdirs(path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            entries = [entry for entry in it if entry.is_dir(follow_symlinks=False)]
    except OSError as e:
        logger.debug("Skipping unreadable directory: %s", e)
        return []
    entries.sort(key=lambda entry: entry.name)
    return entries


def _walk(path: str) -> str | None:
    for entry in _sorted_subdirs(path):
        if _is_marker(entry.name):
            return entry.path
        if entry.name.startswith("."):
            continue
        found = _walk(entry.path)
        if found is not None:
            return found
    return None


def find_marker_dir(root: str | Path) -> str | None:
    """Return the first ``.tsc`` directory (any casing) under ``root``.

    The tree is walked depth first in lexical order and each directory is
    checked when it is reached, the root included. Symlinks are never
    followed nor matched. Hidden directories other than the marker are not
    descended into, so a hidden root yields nothing unless it is the marker
    itself.
    """
    root = os.fspath(root)
    base = os.path.basename(os.path.normpath(root))
    if not os.path.isdir(root):
        return None
    if _is_marker(base):
        return root
    if base.startswith("."):
        return None
    return _walk(root)
