"""Piece hashing."""

from __future__ import annotations

from maketorrent.piece.hash_scheduler import HashProgressObserver, HashScheduler
from maketorrent.piece.hashing import hash_piece

__all__ = ["HashProgressObserver", "HashScheduler", "hash_piece"]
