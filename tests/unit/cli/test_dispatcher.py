"""Tests for command discovery and the top-level parser."""
from __future__ import annotations

import pytest

from xmlpreprocess import __version__
from xmlpreprocess.cli._dispatcher import build_parser, discover_root_commands, main


class TestDiscovery:
    """Commands are found by module name."""

    def test_commands_discovered(self):
        commands = discover_root_commands()
        assert {"run", "environments", "property"} <= set(commands)
        for info in commands.values():
            assert callable(info["main"])
            assert callable(info["register_args"])

    def test_summaries_exposed(self):
        assert discover_root_commands()["run"]["summary"].startswith("Preprocess")


class TestMain:
    """Entry point behaviour."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "usage: xmlpreprocess" in out
        assert "run" in out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            main(["bogus"])
