"""Content stream segmentation.

The files of a target are read as one logical byte stream through
:class:`ChainedFileReader`, and :func:`iter_pieces` cuts that stream into
fixed-length pieces. Pieces freely span file boundaries; only the last piece
may be shorter than the piece length.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

from maketorrent.models import FileEntry
from maketorrent.utils.exceptions import FileSystemError
from maketorrent.utils.logging_config import get_logger


def num_pieces(total_length: int, piece_length: int) -> int:
    """Number of pieces needed to cover ``total_length`` bytes."""
    if piece_length <= 0:
        msg = f"Piece length must be positive, got {piece_length}"
        raise ValueError(msg)
    return -(-total_length // piece_length)


class ChainedFileReader:
    """Sequential reader over an ordered list of files.

    Presents the files as one stream. Only one file is open at any time and
    it is closed before the next one is opened, whether reading succeeded or
    not. Every file must yield exactly the length it was enumerated with,
    otherwise the content changed underneath us and the piece hashes would no
    longer describe the file list.
    """

    def __init__(
        self,
        base: str | Path,
        files: Sequence[FileEntry],
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            base: Directory the file entry paths are relative to
            files: Files in stream order
            logger: Logger for per-file diagnostics

        """
        self.base = Path(base)
        self.files = files
        self.logger = logger or get_logger(__name__)
        self._index = 0
        self._handle: BinaryIO | None = None
        self._remaining = 0
        self.position = 0

    def __enter__(self) -> ChainedFileReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the currently open file, if any."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _open_next(self) -> bool:
        """Open the next non-empty file; return False at end of stream."""
        while self._index < len(self.files):
            entry = self.files[self._index]
            self._index += 1
            if entry.length == 0:
                continue
            path = self.base / entry.path
            self.logger.debug("Opening %s at stream offset %d", entry.path, self.position)
            try:
                self._handle = open(path, "rb")  # noqa: SIM115
            except OSError as e:
                msg = f"Cannot open {path}: {e}"
                raise FileSystemError(msg) from e
            self._remaining = entry.length
            return True
        return False

    def _finish_current(self) -> None:
        """Close the current file after checking it has no extra bytes."""
        assert self._handle is not None
        name = self._handle.name
        try:
            trailing = self._handle.read(1)
        except OSError as e:
            self.close()
            msg = f"Error reading {name}: {e}"
            raise FileSystemError(msg) from e
        self.close()
        if trailing:
            msg = f"File grew while hashing: {name}"
            raise FileSystemError(msg)

    def readinto(self, buffer: bytearray | memoryview) -> int:
        """Fill ``buffer`` from the stream, crossing file boundaries.

        Returns:
            Number of bytes written; less than ``len(buffer)`` only at the
            end of the stream.

        Raises:
            FileSystemError: On read failure or when a file is shorter or
                longer than its enumerated length

        """
        view = memoryview(buffer)
        filled = 0
        while filled < len(view):
            if self._handle is None and not self._open_next():
                break
            assert self._handle is not None
            want = min(len(view) - filled, self._remaining)
            try:
                n = self._handle.readinto(view[filled : filled + want])
            except OSError as e:
                name = self._handle.name
                self.close()
                msg = f"Error reading {name}: {e}"
                raise FileSystemError(msg) from e
            if not n:
                name = self._handle.name
                self.close()
                msg = f"File shrank while hashing: {name} ({self._remaining} bytes missing)"
                raise FileSystemError(msg)
            filled += n
            self._remaining -= n
            self.position += n
            if self._remaining == 0:
                self._finish_current()
        return filled


def iter_pieces(
    reader: ChainedFileReader,
    piece_length: int,
) -> Iterator[tuple[int, bytes]]:
    """Cut the reader's stream into ``(index, data)`` pieces.

    A single accumulation buffer of ``piece_length`` bytes is reused for
    every piece; each yielded piece is an independent copy so the consumer
    may keep it while the buffer is refilled.
    """
    if piece_length <= 0:
        msg = f"Piece length must be positive, got {piece_length}"
        raise ValueError(msg)

    buffer = bytearray(piece_length)
    view = memoryview(buffer)
    index = 0
    while True:
        filled = reader.readinto(buffer)
        if filled == 0:
            return
        yield index, bytes(view[:filled])
        index += 1
        if filled < piece_length:
            return


def segment_files(
    base: str | Path,
    files: Sequence[FileEntry],
    piece_length: int,
    logger: logging.Logger | None = None,
) -> Iterator[tuple[int, bytes]]:
    """Yield the pieces of ``files`` read from ``base`` in stream order."""
    with ChainedFileReader(base, files, logger=logger) as reader:
        yield from iter_pieces(reader, piece_length)
