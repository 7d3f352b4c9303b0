"""Common CLI argument registration utilities.

Reusable argument groups shared by the ``run``, ``environments`` and
``property`` commands.
"""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag for an explicit configuration overlay."""
    parser.add_argument(
        "--config",
        type=str,
        help="Configuration file (default: ./xmlpreprocess.yaml when present)",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """Add --verbose flag (debug logging on stderr)."""
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress and debug details to stderr",
    )


def add_settings_args(parser: argparse.ArgumentParser) -> None:
    """Add the settings source arguments.

    Every option may be repeated and also accepts ``;``-separated lists.
    """
    group = parser.add_argument_group("settings")
    group.add_argument(
        "-x", "--spreadsheet",
        dest="spreadsheets",
        action="append",
        default=[],
        metavar="FILE",
        help="Settings spreadsheet (.xml SpreadsheetML or .csv)",
    )
    group.add_argument(
        "--custom",
        dest="custom",
        action="append",
        default=[],
        metavar="COMMAND",
        help="Command that writes CSV settings to @tempFile@",
    )
    group.add_argument(
        "-s", "--settings",
        dest="settings_files",
        action="append",
        default=[],
        metavar="FILE",
        help="XML settings file",
    )
    group.add_argument(
        "-e", "--environment",
        dest="environment",
        help="Environment column to read from the settings sources",
    )
    group.add_argument(
        "-d", "--define",
        dest="defines",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Define a property (applied last, overrides settings)",
    )
    group.add_argument(
        "--false-undefines",
        action="store_true",
        default=None,
        help="Treat the value False as an undefine sentinel",
    )


def add_layout_args(parser: argparse.ArgumentParser) -> None:
    """Add spreadsheet layout overrides (1-based)."""
    group = parser.add_argument_group("spreadsheet layout")
    group.add_argument("--environment-row", type=int, help="Row holding the environment names")
    group.add_argument("--first-value-row", type=int, help="First row holding setting values")
    group.add_argument("--setting-name-column", type=int, help="Column holding the setting names")
    group.add_argument("--default-value-column", type=int, help="Column holding the default values")


def add_token_args(parser: argparse.ArgumentParser) -> None:
    """Add token delimiter overrides."""
    group = parser.add_argument_group("tokens")
    group.add_argument("--token-start", help="Token start delimiter (default: ${)")
    group.add_argument("--token-end", help="Token end delimiter (default: }, or the start token)")


def add_quiet_flag(parser: argparse.ArgumentParser) -> None:
    """Add -q/--quiet (never prompt for input)."""
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Never prompt for missing input",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Flags every command accepts."""
    add_json_flag(parser)
    add_config_flag(parser)
    add_verbose_flag(parser)


__all__ = [
    "add_json_flag",
    "add_config_flag",
    "add_verbose_flag",
    "add_settings_args",
    "add_layout_args",
    "add_token_args",
    "add_quiet_flag",
    "add_standard_flags",
]
