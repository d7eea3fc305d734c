"""SHA-1 piece hashing for BitTorrent v1 metainfo."""

from __future__ import annotations

import hashlib

from maketorrent.models import PIECE_HASH_LENGTH

__all__ = ["PIECE_HASH_LENGTH", "hash_piece"]


def hash_piece(data: bytes) -> bytes:
    """Calculate the SHA-1 digest of one piece.

    Args:
        data: Raw piece bytes (any length, including empty)

    Returns:
        20-byte SHA-1 digest

    Example:
        >>> len(hash_piece(b"test piece data"))
        20

    """
    return hashlib.sha1(data).digest()  # nosec B324 - SHA-1 required by BitTorrent protocol v1
