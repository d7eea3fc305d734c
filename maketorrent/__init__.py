"""maketorrent - BitTorrent metainfo file creator."""

from __future__ import annotations

__version__ = "0.1.0"
