"""Torrent creation pipeline.

Enumerates the target, streams its content through the segmenter into the
hash scheduler and assembles the resulting metainfo.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from maketorrent.core.files import collect_files, total_length
from maketorrent.core.metainfo import assemble_metainfo
from maketorrent.core.stream import num_pieces, segment_files
from maketorrent.models import CreatorConfig, FileEntry, TorrentMetainfo, is_power_of_two
from maketorrent.piece.hash_scheduler import HashProgressObserver, HashScheduler
from maketorrent.utils.exceptions import ConfigurationError
from maketorrent.utils.logging_config import get_logger


class TorrentCreator:
    """Creates v1 metainfo for a file or directory."""

    def __init__(
        self,
        config: CreatorConfig | None = None,
        observer: HashProgressObserver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the creator.

        Args:
            config: Creation settings (piece length, hash workers)
            observer: Receives per-piece hashing progress
            logger: Logger passed down to every pipeline stage

        """
        self.config = config or CreatorConfig()
        self.observer = observer
        self.logger = logger or get_logger(__name__)

    def hash_files(
        self,
        base: str | Path,
        files: Sequence[FileEntry],
        piece_length: int,
    ) -> list[bytes]:
        """Hash ``files`` (relative to ``base``) as one stream.

        Returns:
            Piece hashes ordered by piece index

        """
        expected = num_pieces(total_length(list(files)), piece_length)
        with HashScheduler(
            expected_pieces=expected,
            workers=self.config.hash_workers,
            max_pending=self.config.max_pending_pieces,
            observer=self.observer,
            logger=self.logger,
        ) as scheduler:
            return scheduler.hash_pieces(
                segment_files(base, files, piece_length, logger=self.logger)
            )

    def create(
        self,
        target: str | Path,
        trackers: Sequence[str],
        name: str | None = None,
        comment: str | None = None,
        private: bool = False,
        piece_length: int | None = None,
        creation_date: int | None = None,
    ) -> TorrentMetainfo:
        """Create metainfo for ``target``.

        Args:
            target: File or directory to describe
            trackers: Announce URLs (at least one)
            name: Torrent name (defaults to the target's basename)
            comment: Optional comment
            private: Set the private flag
            piece_length: Piece length in bytes (defaults to the configured one)
            creation_date: Seconds since the epoch (defaults to now)

        Raises:
            ConfigurationError: If the piece length or trackers are invalid
            TorrentError: If the target does not exist
            FileSystemError: If reading the target fails

        """
        piece_length = piece_length or self.config.piece_length
        if not is_power_of_two(piece_length):
            msg = f"Piece length must be power of 2, got {piece_length}"
            raise ConfigurationError(msg)
        if not trackers:
            msg = "You need to specify at least one announce URL"
            raise ConfigurationError(msg)

        target = Path(target)
        files = collect_files(target, logger=self.logger)
        single_file = target.is_file()
        base = target.parent if single_file else target

        size = total_length(files)
        self.logger.info("%d bytes in all", size)
        self.logger.info(
            "That's %d pieces of %d bytes each",
            num_pieces(size, piece_length),
            piece_length,
        )

        pieces = self.hash_files(base, files, piece_length)

        return assemble_metainfo(
            name=name or target.resolve().name,
            files=files,
            piece_length=piece_length,
            pieces=pieces,
            trackers=trackers,
            comment=comment,
            created_by=self.config.created_by,
            creation_date=creation_date,
            private=private,
            single_file=single_file,
        )
