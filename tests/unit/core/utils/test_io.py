"""Tests for file I/O helpers."""
from __future__ import annotations

from pathlib import Path

import pytest

from xmlpreprocess.core.utils.io import expand_file_args, read_text, split_file_args, write_text


class TestReadWrite:
    """Newlines and encodings survive a read/write cycle."""

    def test_crlf_kept(self, tmp_path: Path):
        path = tmp_path / "a.xml"
        path.write_bytes(b"<a>\r\n</a>")
        assert read_text(path) == "<a>\r\n</a>"

    def test_bom_dropped(self, tmp_path: Path):
        path = tmp_path / "a.xml"
        path.write_bytes("\ufeff<a/>".encode("utf-8"))
        assert read_text(path) == "<a/>"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_text(tmp_path / "none.xml")

    def test_write_creates_parents(self, tmp_path: Path):
        path = tmp_path / "deep" / "dir" / "out.xml"
        write_text(path, "<a>\r\n</a>")
        assert path.read_bytes() == b"<a>\r\n</a>"
        assert list(path.parent.iterdir()) == [path]


class TestFileArgs:
    """Repeated and ';'-separated file arguments."""

    def test_split(self):
        assert split_file_args(["a.xml;b.xml", " c.xml ", ""]) == ["a.xml", "b.xml", "c.xml"]

    def test_wildcards_expanded_and_sorted(self, tmp_path: Path):
        for name in ("b.config", "a.config", "c.txt"):
            (tmp_path / name).write_text("", encoding="utf-8")
        files = expand_file_args([str(tmp_path / "*.config")])
        assert files == [str(tmp_path / "a.config"), str(tmp_path / "b.config")]

    def test_missing_plain_file_kept(self, tmp_path: Path):
        missing = str(tmp_path / "missing.xml")
        assert expand_file_args([missing]) == [missing]

    def test_none(self):
        assert expand_file_args(None) == []
