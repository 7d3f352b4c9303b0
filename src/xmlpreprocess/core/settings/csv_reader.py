"""CSV settings files.

Lines starting with ``#`` are comments. The first non-empty row is the
header and fixes the column count; cells beyond it are dropped.
"""
from __future__ import annotations

import csv
from typing import Iterable, Iterator, TextIO

from .base import SettingsLayout, SettingsSource, SettingsTable

COMMENT_PREFIX = "#"


def _uncommented(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        yield "\n" if line.startswith(COMMENT_PREFIX) else line


def read_csv_table(handle: TextIO) -> SettingsTable:
    """Read a settings table from an open CSV text stream."""
    table = SettingsTable()
    header_seen = False
    for row in csv.reader(_uncommented(handle)):
        if not header_seen:
            if not row:
                continue
            table.columns = len(row)
            header_seen = True
        table.add_row(row)
    return table


class CsvSettingsSource(SettingsSource):
    """Settings spreadsheet saved as comma separated values."""

    requires_row_fixup = True

    def read_table(self, layout: SettingsLayout) -> SettingsTable:
        with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
            return read_csv_table(f)


__all__ = ["CsvSettingsSource", "read_csv_table", "COMMENT_PREFIX"]
