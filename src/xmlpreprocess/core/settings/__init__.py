"""Settings sources: spreadsheets, CSV files, custom commands and XML settings files."""
from __future__ import annotations

from .base import FIRST_VALUE_ROW_DEFAULT, SettingsLayout, SettingsSource, SettingsTable
from .csv_reader import CsvSettingsSource
from .custom import CustomSettingsSource
from .loader import SettingsLoader, create_source
from .spreadsheetml import SpreadsheetMLSettingsSource
from .xml_file import read_settings_file

__all__ = [
    "FIRST_VALUE_ROW_DEFAULT",
    "SettingsLayout",
    "SettingsSource",
    "SettingsTable",
    "CsvSettingsSource",
    "CustomSettingsSource",
    "SpreadsheetMLSettingsSource",
    "SettingsLoader",
    "create_source",
    "read_settings_file",
]
