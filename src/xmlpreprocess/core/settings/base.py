"""Settings tables and the source interface shared by every reader."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

FIRST_VALUE_ROW_DEFAULT = 7

Row = List[Optional[str]]


@dataclass
class SettingsLayout:
    """Where things live in a settings spreadsheet (all 1-based)."""

    environment_row: int = 2
    first_value_row: int = FIRST_VALUE_ROW_DEFAULT
    setting_name_column: int = 1
    default_value_column: int = 2

    @classmethod
    def from_config(cls, cfg: Optional[Mapping[str, Any]]) -> "SettingsLayout":
        """Build a layout from the ``spreadsheet`` configuration section."""
        cfg = cfg or {}
        return cls(
            environment_row=int(cfg.get("environmentRow", 2)),
            first_value_row=int(cfg.get("firstValueRow", FIRST_VALUE_ROW_DEFAULT)),
            setting_name_column=int(cfg.get("settingNameColumn", 1)),
            default_value_column=int(cfg.get("defaultValueColumn", 2)),
        )


@dataclass
class SettingsTable:
    """Rows of cells as read from a source.

    ``None`` marks a cell that was never written; readers that fill every
    cell use empty strings instead. ``first_value_row`` is set when the
    source itself says where the values start (a frozen pane).
    """

    columns: int = 0
    rows: List[Row] = field(default_factory=list)
    first_value_row: Optional[int] = None

    def add_row(self, cells: Optional[List[Optional[str]]] = None) -> None:
        row: Row = [None] * self.columns
        for index, value in enumerate(cells or []):
            if index < self.columns:
                row[index] = value
        self.rows.append(row)

    def insert_empty_rows(self, index: int, count: int) -> None:
        for _ in range(max(count, 0)):
            self.rows.insert(index, [None] * self.columns)

    def cell(self, row: int, column: int) -> Optional[str]:
        """Cell at 0-based ``(row, column)``, or None when out of range."""
        if row < 0 or row >= len(self.rows) or column < 0:
            return None
        cells = self.rows[row]
        return cells[column] if column < len(cells) else None


class SettingsSource(ABC):
    """A place settings tables are read from."""

    kind = "spreadsheet"
    # CSV-shaped tables carry no title rows and are padded to the layout.
    requires_row_fixup = False

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def exists(self) -> bool:
        return Path(self.path).exists()

    @abstractmethod
    def read_table(self, layout: SettingsLayout) -> SettingsTable:
        """Read the raw table."""


__all__ = [
    "FIRST_VALUE_ROW_DEFAULT",
    "Row",
    "SettingsLayout",
    "SettingsTable",
    "SettingsSource",
]
