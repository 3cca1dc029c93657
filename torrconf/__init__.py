"""torrconf - persistent settings for a torrent-streaming server."""

from __future__ import annotations

__version__ = "0.1.0"
