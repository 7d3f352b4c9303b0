"""File I/O helpers.

Templates are read and written without newline translation so CRLF files
stay CRLF, and a UTF-8 byte order mark is dropped on read.
"""
from __future__ import annotations

import glob
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: PathLike) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def read_text(path: PathLike) -> str:
    """Read a text file exactly as stored.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    """Atomically write ``content`` to ``path`` (temp file + rename)."""
    path = Path(path)
    ensure_parent_dir(path)
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=str(path.parent),
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(str(tmp_path), str(path))
        tmp_path = None
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def expand_file_args(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated/``;``-separated file arguments and expand wildcards.

    Entries without wildcards are kept even if they do not exist, so callers
    can report them as missing.
    """
    files: List[str] = []
    for value in values or []:
        for part in value.split(";"):
            part = part.strip()
            if not part:
                continue
            if any(ch in part for ch in "*?["):
                files.extend(sorted(glob.glob(part)))
            else:
                files.append(part)
    return files


def split_file_args(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated/``;``-separated arguments without wildcard expansion."""
    files: List[str] = []
    for value in values or []:
        files.extend(part.strip() for part in value.split(";") if part.strip())
    return files


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "expand_file_args",
    "split_file_args",
]
