"""Metainfo assembly and its bencoded representation.

:func:`assemble_metainfo` aggregates the file list, piece hashes and scalar
metadata into a validated :class:`TorrentMetainfo`. The remaining helpers map
that model to and from the BEP 3 dictionary layout, compute the info hash and
write the ``.torrent`` file.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from maketorrent.core.bencode import decode, encode
from maketorrent.models import PIECE_HASH_LENGTH, FileEntry, TorrentMetainfo
from maketorrent.utils.exceptions import FileSystemError, TorrentError


def assemble_metainfo(
    name: str,
    files: Sequence[FileEntry],
    piece_length: int,
    pieces: Sequence[bytes],
    trackers: Sequence[str],
    comment: str | None = None,
    created_by: str | None = None,
    creation_date: int | None = None,
    private: bool = False,
    single_file: bool = False,
) -> TorrentMetainfo:
    """Build the in-memory metainfo.

    Args:
        name: Torrent name
        files: Files in stream order
        piece_length: Piece length in bytes
        pieces: Piece hashes ordered by piece index
        trackers: Announce URLs; the first one is the primary announce
        comment: Optional comment
        created_by: Producer identification
        creation_date: Seconds since the epoch (defaults to now)
        private: Set the BEP 27 private flag
        single_file: Emit ``info.length`` instead of ``info.files``

    Raises:
        TorrentError: If no tracker is given or the pieces do not cover the
            files exactly

    """
    if not trackers:
        msg = "At least one announce URL is required"
        raise TorrentError(msg)

    try:
        return TorrentMetainfo(
            name=name,
            announce=trackers[0],
            announce_list=list(trackers[1:]),
            comment=comment or None,
            created_by=created_by,
            creation_date=int(time.time()) if creation_date is None else creation_date,
            is_private=private,
            files=list(files),
            total_length=sum(f.length for f in files),
            single_file=single_file,
            piece_length=piece_length,
            pieces=list(pieces),
        )
    except PydanticValidationError as e:
        msg = f"Inconsistent metainfo: {e}"
        raise TorrentError(msg) from e


def metainfo_to_dict(meta: TorrentMetainfo) -> dict[bytes, Any]:
    """Map metainfo onto the BEP 3 dictionary layout."""
    info: dict[bytes, Any] = {
        b"name": meta.name.encode("utf-8"),
        b"piece length": meta.piece_length,
        b"pieces": b"".join(meta.pieces),
    }
    if meta.is_private:
        info[b"private"] = 1

    if meta.single_file:
        info[b"length"] = meta.files[0].length
    else:
        info[b"files"] = [
            {
                b"length": f.length,
                b"path": [part.encode("utf-8") for part in f.parts],
            }
            for f in meta.files
        ]

    torrent: dict[bytes, Any] = {
        b"announce": meta.announce.encode("utf-8"),
        b"info": info,
    }

    # BEP 12: one tier per tracker, primary first
    if meta.announce_list:
        torrent[b"announce-list"] = [
            [url.encode("utf-8")] for url in (meta.announce, *meta.announce_list)
        ]

    if meta.comment:
        torrent[b"comment"] = meta.comment.encode("utf-8")
    if meta.created_by:
        torrent[b"created by"] = meta.created_by.encode("utf-8")
    if meta.creation_date is not None:
        torrent[b"creation date"] = meta.creation_date
    if meta.encoding:
        torrent[b"encoding"] = meta.encoding.encode("utf-8")

    return torrent


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def metainfo_from_dict(data: dict[bytes, Any]) -> TorrentMetainfo:
    """Rebuild metainfo from a decoded BEP 3 dictionary.

    Raises:
        TorrentError: If required keys are missing or inconsistent

    """
    try:
        info = data[b"info"]
        raw_pieces = info[b"pieces"]
        if len(raw_pieces) % PIECE_HASH_LENGTH:
            msg = f"pieces length {len(raw_pieces)} is not a multiple of 20"
            raise TorrentError(msg)
        pieces = [
            raw_pieces[i : i + PIECE_HASH_LENGTH]
            for i in range(0, len(raw_pieces), PIECE_HASH_LENGTH)
        ]

        name = _text(info[b"name"])
        single_file = b"files" not in info
        if single_file:
            files = [FileEntry(path=name, length=info[b"length"])]
        else:
            files = [
                FileEntry(
                    path="/".join(_text(part) for part in entry[b"path"]),
                    length=entry[b"length"],
                )
                for entry in info[b"files"]
            ]

        announce = _text(data[b"announce"])
        tiers = data.get(b"announce-list", [])
        urls = [_text(url) for tier in tiers for url in tier]
        if urls and urls[0] == announce:
            urls = urls[1:]

        comment = data.get(b"comment")
        created_by = data.get(b"created by")
        encoding = data.get(b"encoding")
        return TorrentMetainfo(
            name=name,
            announce=announce,
            announce_list=urls,
            comment=_text(comment) if comment is not None else None,
            created_by=_text(created_by) if created_by is not None else None,
            creation_date=data.get(b"creation date"),
            encoding=_text(encoding) if encoding is not None else None,
            is_private=info.get(b"private", 0) == 1,
            files=files,
            total_length=sum(f.length for f in files),
            single_file=single_file,
            piece_length=info[b"piece length"],
            pieces=pieces,
        )
    except TorrentError:
        raise
    except (KeyError, TypeError, UnicodeDecodeError) as e:
        msg = f"Malformed metainfo: {e}"
        raise TorrentError(msg) from e
    except PydanticValidationError as e:
        msg = f"Inconsistent metainfo: {e}"
        raise TorrentError(msg) from e


def encode_metainfo(meta: TorrentMetainfo) -> bytes:
    """Bencode metainfo into ``.torrent`` file contents."""
    return encode(metainfo_to_dict(meta))


def decode_metainfo(raw: bytes) -> TorrentMetainfo:
    """Parse ``.torrent`` file contents."""
    data = decode(raw)
    if not isinstance(data, dict):
        msg = "Torrent file must contain a dictionary"
        raise TorrentError(msg)
    return metainfo_from_dict(data)


def info_hash(meta: TorrentMetainfo) -> bytes:
    """SHA-1 of the bencoded info dictionary."""
    info = metainfo_to_dict(meta)[b"info"]
    return hashlib.sha1(encode(info)).digest()  # nosec B324 - SHA-1 required by BitTorrent protocol v1


def piece_spans(meta: TorrentMetainfo) -> list[list[tuple[int, int, int]]]:
    """Map every piece onto the file ranges it covers.

    Returns:
        For each piece index, a list of ``(file_index, offset, length)``
        segments in stream order. Zero-length files never appear.

    """
    spans: list[list[tuple[int, int, int]]] = [[] for _ in range(meta.num_pieces)]
    stream_offset = 0
    for file_index, entry in enumerate(meta.files):
        file_offset = 0
        while file_offset < entry.length:
            piece_index, piece_offset = divmod(stream_offset, meta.piece_length)
            length = min(meta.piece_length - piece_offset, entry.length - file_offset)
            spans[piece_index].append((file_index, file_offset, length))
            file_offset += length
            stream_offset += length
    return spans


def write_metainfo(meta: TorrentMetainfo, output: str | Path) -> Path:
    """Write the ``.torrent`` file atomically.

    The encoded bytes go to a temporary file in the destination directory
    which then replaces ``output``, so a failed write never leaves a
    truncated torrent behind.

    Raises:
        FileSystemError: If the destination cannot be written

    """
    output = Path(output)
    payload = encode_metainfo(meta)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output.name}.", suffix=".tmp", dir=output.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, output)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        msg = f"Cannot write torrent file {output}: {e}"
        raise FileSystemError(msg) from e
    return output
