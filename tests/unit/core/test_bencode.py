"""Tests for the bencode wrapper."""

from __future__ import annotations

import pytest

from maketorrent.core.bencode import decode, encode
from maketorrent.utils.exceptions import BencodeError

pytestmark = [pytest.mark.unit, pytest.mark.core]


class TestBencode:
    """Test cases for encode/decode."""

    def test_encode_sorts_dictionary_keys(self):
        """Keys are written in sorted order."""
        assert encode({b"b": 1, b"a": b"x"}) == b"d1:a1:x1:bi1ee"

    def test_encode_nested(self):
        """Lists and dictionaries nest."""
        data = {b"files": [{b"length": 3, b"path": [b"a", b"b"]}]}
        assert encode(data) == b"d5:filesld6:lengthi3e4:pathl1:a1:beeee"

    def test_decode_returns_bytes(self):
        """Strings decode to bytes."""
        assert decode(b"d4:name4:teste") == {b"name": b"test"}

    def test_decode_invalid(self):
        """Malformed input raises BencodeError."""
        with pytest.raises(BencodeError):
            decode(b"d4:name")

    def test_encode_unsupported_type(self):
        """Types outside bencoding raise BencodeError."""
        with pytest.raises(BencodeError):
            encode({b"x": 1.5})
