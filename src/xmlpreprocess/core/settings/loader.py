"""Load environment settings out of settings tables."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..exceptions import SettingsSourceError
from .base import SettingsLayout, SettingsSource, SettingsTable
from .csv_reader import CsvSettingsSource
from .custom import CustomSettingsSource
from .spreadsheetml import SpreadsheetMLSettingsSource

logger = logging.getLogger(__name__)

SOURCE_TYPES = {
    ".csv": CsvSettingsSource,
    ".xml": SpreadsheetMLSettingsSource,
}


def create_source(path: Union[str, Path], custom: bool = False) -> SettingsSource:
    """Pick a settings source for ``path`` by file extension.

    Raises:
        SettingsSourceError: For unsupported spreadsheet formats
    """
    if custom:
        return CustomSettingsSource(path)
    suffix = Path(str(path)).suffix.lower()
    source_type = SOURCE_TYPES.get(suffix)
    if source_type is None:
        raise SettingsSourceError(
            f"Spreadsheet file type not supported: {path}",
            context={"path": str(path), "supported": sorted(SOURCE_TYPES)},
        )
    return source_type(path)


class SettingsLoader:
    """Read environments and their values from settings sources.

    Usage:
        loader = SettingsLoader(SettingsLayout())
        source = create_source("settings.csv")
        loader.list_environments(source)             # ["Development", "Production"]
        loader.load_properties(source, "production")  # [("server", "prod01"), ...]
    """

    def __init__(self, layout: Optional[SettingsLayout] = None) -> None:
        self.layout = layout or SettingsLayout()

    def load_table(self, source: SettingsSource) -> SettingsTable:
        """Read ``source`` and pad CSV-shaped tables to the layout.

        Raises:
            FileNotFoundError: If the source does not exist
        """
        if not source.exists():
            raise FileNotFoundError(f'Settings data source not found: "{source.path}"')
        table = source.read_table(self.layout)
        if source.requires_row_fixup:
            # Header becomes the environment row, data starts at the first value row.
            table.insert_empty_rows(0, self.layout.environment_row - 1)
            table.insert_empty_rows(
                self.layout.environment_row,
                self.layout.first_value_row - self.layout.environment_row - 1,
            )
        logger.debug("Read %d row(s) from %s", len(table.rows), source.path)
        return table

    def _environment_columns(self, table: SettingsTable) -> List[Tuple[int, str]]:
        header = self.layout.environment_row - 1
        columns: List[Tuple[int, str]] = []
        column = self.layout.default_value_column
        while column < table.columns:
            name = table.cell(header, column)
            if name is None:
                break
            if name:
                columns.append((column, name))
            column += 1
        return columns

    def environments(self, table: SettingsTable) -> List[str]:
        return [name for _, name in self._environment_columns(table)]

    def list_environments(self, source: SettingsSource) -> List[str]:
        """Environment names of ``source`` in column order."""
        return self.environments(self.load_table(source))

    def find_environment_column(self, table: SettingsTable, environment: str) -> int:
        """0-based column of ``environment`` (last match wins), or -1."""
        found = -1
        for column, name in self._environment_columns(table):
            if name.lower() == environment.lower():
                found = column
        return found

    def _value(self, table: SettingsTable, row: int, column: int) -> str:
        value = (table.cell(row, column) or "").strip()
        if not value:
            value = (table.cell(row, self.layout.default_value_column - 1) or "").strip()
        return value

    def properties_from_table(self, table: SettingsTable, environment: str) -> List[Tuple[str, str]]:
        """``(name, value)`` pairs for ``environment`` in row order.

        Raises:
            SettingsSourceError: If the environment has no column
        """
        column = self.find_environment_column(table, environment)
        if column < 0:
            raise SettingsSourceError(
                f"Environment {environment} was not found in settings spreadsheet",
                context={"environment": environment, "available": self.environments(table)},
            )

        first_row = table.first_value_row or self.layout.first_value_row
        name_column = self.layout.setting_name_column - 1
        pairs: List[Tuple[str, str]] = []
        for row in range(first_row - 1, len(table.rows)):
            name = table.cell(row, name_column)
            if name is None or not name.strip():
                continue
            pairs.append((name, self._value(table, row, column)))
        return pairs

    def load_properties(self, source: SettingsSource, environment: Optional[str]) -> List[Tuple[str, str]]:
        """Read ``source`` and return the settings for ``environment``.

        Raises:
            SettingsSourceError: If no environment was given or it is unknown
        """
        if not environment:
            raise SettingsSourceError(
                f"Error loading settings from {source.path}, environment name was not supplied.",
                context={"path": source.path},
            )
        return self.properties_from_table(self.load_table(source), environment)


__all__ = ["SettingsLoader", "create_source", "SOURCE_TYPES"]
