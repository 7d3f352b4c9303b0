"""Tests for SettingsLoader, source selection and custom commands."""
from __future__ import annotations

import logging
import os
import shlex
import sys
from pathlib import Path

import pytest

from xmlpreprocess.core.exceptions import SettingsSourceError
from xmlpreprocess.core.settings import (
    CsvSettingsSource,
    CustomSettingsSource,
    SettingsLayout,
    SettingsLoader,
    SpreadsheetMLSettingsSource,
    create_source,
)

SETTINGS_CSV = (
    "# Environment settings\n"
    "Setting,Default,Dev,Prod\n"
    "server,localhost,,prod01\n"
    "port,80,8080,\n"
    'conn,"Server=${server},1433",,\n'
)


@pytest.fixture
def csv_source(tmp_path: Path) -> CsvSettingsSource:
    path = tmp_path / "settings.csv"
    path.write_text(SETTINGS_CSV, encoding="utf-8")
    return CsvSettingsSource(path)


class TestCreateSource:
    """Source type by extension."""

    def test_csv(self):
        assert isinstance(create_source("Settings.CSV"), CsvSettingsSource)

    def test_spreadsheetml(self):
        assert isinstance(create_source("settings.xml"), SpreadsheetMLSettingsSource)

    def test_custom(self):
        assert isinstance(create_source("tool --out @tempFile@", custom=True), CustomSettingsSource)

    def test_unsupported(self):
        with pytest.raises(SettingsSourceError) as exc_info:
            create_source("settings.xls")
        assert str(exc_info.value) == "Spreadsheet file type not supported: settings.xls"


class TestSettingsLoader:
    """Environment discovery and values."""

    def test_row_fixup_lines_header_up_with_layout(self, csv_source):
        table = SettingsLoader().load_table(csv_source)
        assert table.cell(1, 0) == "Setting"
        assert table.cell(6, 0) == "server"

    def test_list_environments(self, csv_source):
        assert SettingsLoader().list_environments(csv_source) == ["Dev", "Prod"]

    def test_values_with_default_fallback(self, csv_source):
        loader = SettingsLoader()
        assert loader.load_properties(csv_source, "Dev") == [
            ("server", "localhost"),
            ("port", "8080"),
            ("conn", "Server=${server},1433"),
        ]
        assert loader.load_properties(csv_source, "prod")[:2] == [("server", "prod01"), ("port", "80")]

    def test_unknown_environment(self, csv_source):
        with pytest.raises(SettingsSourceError) as exc_info:
            SettingsLoader().load_properties(csv_source, "QA")
        assert str(exc_info.value) == "Environment QA was not found in settings spreadsheet"

    def test_environment_required(self, csv_source):
        with pytest.raises(SettingsSourceError) as exc_info:
            SettingsLoader().load_properties(csv_source, None)
        assert "environment name was not supplied" in str(exc_info.value)

    def test_missing_source(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            SettingsLoader().load_table(CsvSettingsSource(tmp_path / "none.csv"))

    def test_custom_layout(self, tmp_path: Path):
        path = tmp_path / "settings.csv"
        path.write_text("Name,Dev\nserver,dev01\n", encoding="utf-8")
        layout = SettingsLayout(environment_row=1, first_value_row=2, default_value_column=1)
        loader = SettingsLoader(layout)
        assert loader.list_environments(CsvSettingsSource(path)) == ["Dev"]
        assert loader.load_properties(CsvSettingsSource(path), "Dev") == [("server", "dev01")]

    def test_duplicate_environment_last_wins(self, tmp_path: Path):
        path = tmp_path / "settings.csv"
        path.write_text("Setting,Default,Dev,Dev\nserver,x,first,second\n", encoding="utf-8")
        assert SettingsLoader().load_properties(CsvSettingsSource(path), "Dev") == [("server", "second")]

    def test_layout_from_config(self):
        layout = SettingsLayout.from_config({"environmentRow": 3, "firstValueRow": 9})
        assert layout.environment_row == 3
        assert layout.first_value_row == 9
        assert layout.default_value_column == 2


@pytest.mark.skipif(os.name == "nt", reason="POSIX quoting")
class TestCustomSettingsSource:
    """Commands that write a CSV file to the temp file marker."""

    def test_reads_generated_csv(self, tmp_path: Path, caplog):
        script = tmp_path / "make_settings.py"
        script.write_text(
            "import sys\n"
            "with open(sys.argv[1], 'w') as f:\n"
            "    f.write('Setting,Default,Dev\\nserver,localhost,dev01\\n')\n"
            "print('generated')\n",
            encoding="utf-8",
        )
        command = f"{shlex.quote(sys.executable)} {shlex.quote(str(script))} @tempFile@"
        source = CustomSettingsSource(command)
        caplog.set_level(logging.INFO, logger="xmlpreprocess.core.settings.custom")
        assert source.exists()
        assert SettingsLoader().load_properties(source, "Dev") == [("server", "dev01")]
        assert "generated" in caplog.text

    def test_missing_program(self):
        source = CustomSettingsSource("/nonexistent/settings-tool @tempFile@")
        with pytest.raises(SettingsSourceError):
            SettingsLoader().load_table(source)

    def test_empty_command_does_not_exist(self):
        assert not CustomSettingsSource("   ").exists()
