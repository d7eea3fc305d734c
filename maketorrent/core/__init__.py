"""Core torrent creation: enumeration, segmentation and metainfo."""

from __future__ import annotations
