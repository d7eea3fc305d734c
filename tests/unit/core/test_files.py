"""Tests for target enumeration."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from maketorrent.core.files import collect_files, total_length
from maketorrent.models import FileEntry
from maketorrent.utils.exceptions import FileSystemError, TorrentError

pytestmark = [pytest.mark.unit, pytest.mark.core]

linux_only = pytest.mark.skipif(
    sys.platform != "linux", reason="needs byte-oriented file names"
)


def write_undecodable(directory: Path) -> Path:
    """Create a file whose name is not valid UTF-8."""
    raw = os.path.join(os.fsencode(directory), b"bad\xff.bin")
    try:
        with open(raw, "wb") as f:
            f.write(b"data")
    except OSError:
        pytest.skip("file system rejects non-UTF-8 names")
    return Path(os.fsdecode(raw))


class TestCollectFiles:
    """Test cases for collect_files."""

    def test_single_file_uses_basename(self, tmp_path):
        """A single file yields one entry named after its basename."""
        target = tmp_path / "data.bin"
        target.write_bytes(b"x" * 10)

        files = collect_files(target)

        assert files == [FileEntry(path="data.bin", length=10)]

    def test_single_empty_file(self, tmp_path):
        """An empty file is still listed with length 0."""
        target = tmp_path / "empty.txt"
        target.write_bytes(b"")

        assert collect_files(target) == [FileEntry(path="empty.txt", length=0)]

    def test_empty_directory(self, make_tree):
        """An empty directory has no file entries."""
        root = make_tree({})

        files = collect_files(root)

        assert files == []
        assert total_length(files) == 0

    def test_directory_is_sorted_and_relative(self, make_tree):
        """Entries are sorted by name at every level and relative to the root."""
        root = make_tree(
            {
                "b.txt": b"bb",
                "a/z.txt": b"z",
                "a/m/inner.txt": b"inner",
                "A.txt": b"A",
                "c/empty": b"",
            }
        )

        files = collect_files(root)

        assert [f.path for f in files] == [
            "A.txt",
            "a/m/inner.txt",
            "a/z.txt",
            "b.txt",
            "c/empty",
        ]
        assert [f.length for f in files] == [1, 5, 1, 2, 0]
        assert total_length(files) == 9

    def test_order_is_stable_across_runs(self, make_tree):
        """Enumerating an unchanged tree twice gives the same order."""
        root = make_tree({f"dir{i % 3}/file{i}": bytes([i]) * i for i in range(12)})

        assert collect_files(root) == collect_files(root)

    def test_empty_subdirectories_are_ignored(self, make_tree):
        """Directories contribute no entries of their own."""
        root = make_tree({"x.txt": b"x"})
        (root / "nested" / "deeper").mkdir(parents=True)

        assert [f.path for f in collect_files(root)] == ["x.txt"]

    def test_entry_parts(self, make_tree):
        """FileEntry.parts splits the relative path into components."""
        root = make_tree({"a/b/c.txt": b"c"})

        (entry,) = collect_files(root)

        assert entry.parts == ["a", "b", "c.txt"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_directory_symlinks_are_not_followed(self, make_tree):
        """Symlinked directories are skipped, symlinked files are included."""
        root = make_tree({"real/file.txt": b"data"})
        os.symlink(root / "real", root / "loop")
        os.symlink(root / "real" / "file.txt", root / "link.txt")

        files = collect_files(root)

        assert [f.path for f in files] == ["link.txt", "real/file.txt"]
        assert [f.length for f in files] == [4, 4]

    def test_missing_target(self, tmp_path):
        """A missing target raises TorrentError."""
        with pytest.raises(TorrentError, match="does not exist"):
            collect_files(tmp_path / "missing")

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0,
        reason="root can read any directory",
    )
    def test_unreadable_directory_is_fatal(self, make_tree):
        """A directory that cannot be listed aborts enumeration."""
        root = make_tree({"ok.txt": b"ok", "locked/secret.txt": b"s"})
        locked = root / "locked"
        locked.chmod(0)
        try:
            with pytest.raises(FileSystemError, match="Cannot list directory"):
                collect_files(root)
        finally:
            locked.chmod(0o755)

    @linux_only
    def test_undecodable_name_in_directory(self, make_tree):
        """A non-UTF-8 file name inside the tree is a TorrentError."""
        root = make_tree({"good.txt": b"ok"})
        write_undecodable(root)

        with pytest.raises(TorrentError, match="not valid UTF-8") as excinfo:
            collect_files(root)

        assert "bad\\xff.bin" in str(excinfo.value)

    @linux_only
    def test_undecodable_single_file(self, tmp_path):
        """A non-UTF-8 single-file target is a TorrentError."""
        target = write_undecodable(tmp_path)

        with pytest.raises(TorrentError, match="not valid UTF-8"):
            collect_files(target)
