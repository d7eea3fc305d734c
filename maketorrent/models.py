"""Pydantic models for maketorrent.

Provides validated data models for the metainfo being built and for the
application configuration.
"""

from __future__ import annotations

import os
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from maketorrent import __version__

PIECE_HASH_LENGTH = 20

# Piece length bounds as powers of two (64 KiB .. 32 MiB)
MIN_PIECE_LENGTH_EXPONENT = 16
MAX_PIECE_LENGTH_EXPONENT = 25
DEFAULT_PIECE_LENGTH_EXPONENT = 18


def is_power_of_two(value: int) -> bool:
    """Check if value is a positive power of two."""
    return value > 0 and value & (value - 1) == 0


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FileEntry(BaseModel):
    """A file of the target, relative to the target root."""

    path: str = Field(..., min_length=1, description="Relative POSIX path")
    length: int = Field(..., ge=0, description="File length in bytes")

    model_config = {"frozen": True}

    @property
    def parts(self) -> list[str]:
        """Path components as stored in the metainfo ``path`` list."""
        return self.path.split("/")


class TorrentMetainfo(BaseModel):
    """In-memory torrent descriptor handed to the encoder."""

    name: str = Field(..., min_length=1, description="Torrent name")
    announce: str = Field(..., min_length=1, description="Primary announce URL")
    announce_list: list[str] = Field(
        default_factory=list,
        description="Additional announce URLs",
    )
    comment: str | None = Field(None, description="Torrent comment")
    created_by: str | None = Field(None, description="Created by")
    creation_date: int | None = Field(None, description="Creation date (epoch seconds)")
    encoding: str | None = Field("UTF-8", description="String encoding")
    is_private: bool = Field(
        default=False,
        description="Whether torrent is marked as private (BEP 27)",
    )

    # File information
    files: list[FileEntry] = Field(default_factory=list, description="File list")
    total_length: int = Field(..., ge=0, description="Total length in bytes")
    single_file: bool = Field(
        default=False,
        description="Single-file mode (info.length instead of info.files)",
    )

    # Piece information
    piece_length: int = Field(..., gt=0, description="Piece length in bytes")
    pieces: list[bytes] = Field(default_factory=list, description="Piece hashes")

    @property
    def num_pieces(self) -> int:
        """Number of pieces covering the content."""
        return len(self.pieces)

    @field_validator("piece_length")
    @classmethod
    def validate_piece_length(cls, v: int) -> int:
        """Validate piece length is a power of two."""
        if not is_power_of_two(v):
            msg = f"Piece length must be power of 2, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("pieces")
    @classmethod
    def validate_pieces(cls, v: list[bytes]) -> list[bytes]:
        """Validate every piece hash is a SHA-1 digest."""
        for i, piece_hash in enumerate(v):
            if len(piece_hash) != PIECE_HASH_LENGTH:
                msg = f"Piece {i} hash must be 20 bytes (SHA-1), got {len(piece_hash)}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_layout(self) -> TorrentMetainfo:
        """Validate file list, total length and piece count agree."""
        files_length = sum(f.length for f in self.files)
        if files_length != self.total_length:
            msg = (
                f"total_length {self.total_length} does not match "
                f"sum of file lengths {files_length}"
            )
            raise ValueError(msg)

        expected = -(-self.total_length // self.piece_length)
        if len(self.pieces) != expected:
            msg = f"Expected {expected} piece hashes, got {len(self.pieces)}"
            raise ValueError(msg)

        if self.single_file and len(self.files) != 1:
            msg = f"Single-file torrent must have exactly one file, got {len(self.files)}"
            raise ValueError(msg)
        return self


class CreatorConfig(BaseModel):
    """Torrent creation configuration."""

    piece_length_exponent: int = Field(
        default=DEFAULT_PIECE_LENGTH_EXPONENT,
        ge=MIN_PIECE_LENGTH_EXPONENT,
        le=MAX_PIECE_LENGTH_EXPONENT,
        description="Piece length as a power of two (2^n bytes)",
    )
    hash_workers: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=1,
        le=256,
        description="Number of piece hashing threads",
    )
    max_pending_pieces: int | None = Field(
        default=None,
        ge=1,
        description="Pieces allowed in flight (default: 2 x hash_workers)",
    )
    created_by: str = Field(
        default=f"maketorrent {__version__}",
        description="Created by field",
    )

    @property
    def piece_length(self) -> int:
        """Piece length in bytes."""
        return 1 << self.piece_length_exponent


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Write JSON records to the log file",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class Config(BaseModel):
    """Main configuration model."""

    creator: CreatorConfig = Field(
        default_factory=CreatorConfig,
        description="Torrent creation configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
