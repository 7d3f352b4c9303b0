"""Tests for XML settings files."""
from __future__ import annotations

from pathlib import Path

import pytest

from xmlpreprocess.core.exceptions import SettingsSourceError
from xmlpreprocess.core.settings import read_settings_file

SETTINGS = """<settings>
  <property name="port">8080</property>
  <property name="server">
    <environment name="default">localhost</environment>
    <environment name="Production">prod01</environment>
  </property>
  <property name="timeout">
    <environment name="Production">30</environment>
  </property>
  <property>ignored</property>
</settings>
"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.xml"
    path.write_text(SETTINGS, encoding="utf-8")
    return path


class TestReadSettingsFile:
    """Per-environment values with defaults."""

    def test_matching_environment(self, settings_file: Path):
        assert read_settings_file(settings_file, "production") == [
            ("port", "8080"),
            ("server", "prod01"),
            ("timeout", "30"),
        ]

    def test_default_when_environment_missing(self, settings_file: Path):
        assert read_settings_file(settings_file, "Dev") == [
            ("port", "8080"),
            ("server", "localhost"),
            ("timeout", None),
        ]

    def test_no_environment_uses_defaults(self, settings_file: Path):
        assert dict(read_settings_file(settings_file, None))["server"] == "localhost"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_settings_file(tmp_path / "none.xml", "Dev")

    def test_not_well_formed(self, tmp_path: Path):
        path = tmp_path / "bad.xml"
        path.write_text("<settings>", encoding="utf-8")
        with pytest.raises(SettingsSourceError):
            read_settings_file(path, "Dev")
