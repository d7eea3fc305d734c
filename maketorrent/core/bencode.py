"""Bencoding for BitTorrent metainfo files.

Thin wrapper over ``bencodepy`` that normalises its failures into
:class:`~maketorrent.utils.exceptions.BencodeError`.
"""

from __future__ import annotations

from typing import Any

import bencodepy

from maketorrent.utils.exceptions import BencodeError


def encode(data: Any) -> bytes:
    """Bencode ``data``.

    Dictionary keys are emitted in sorted order as required by BEP 3.

    Raises:
        BencodeError: If ``data`` holds a type bencoding cannot represent

    """
    try:
        return bencodepy.encode(data)
    except Exception as e:
        msg = f"Failed to bencode {type(data).__name__}: {e}"
        raise BencodeError(msg) from e


def decode(data: bytes) -> Any:
    """Decode bencoded ``data``; strings come back as ``bytes``.

    Raises:
        BencodeError: If ``data`` is not valid bencoding

    """
    try:
        return bencodepy.decode(data)
    except Exception as e:
        msg = f"Failed to decode bencoded data: {e}"
        raise BencodeError(msg) from e
