"""
Shared utilities for CLI commands.

Turns parsed arguments plus loaded configuration into the objects the core
works with, loads settings sources into the property store and reports
diagnostics.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from xmlpreprocess.core.config import ConfigManager
from xmlpreprocess.core.context import DiagnosticKind, ProcessingContext
from xmlpreprocess.core.exceptions import SettingsSourceError
from xmlpreprocess.core.properties import PropertyStore
from xmlpreprocess.core.settings import (
    SettingsLayout,
    SettingsLoader,
    SettingsSource,
    create_source,
    read_settings_file,
)
from xmlpreprocess.core.stdlib_logging import configure_logging, suppress_lastresort_in_json_mode
from xmlpreprocess.core.tokens import TokenDelimiters
from xmlpreprocess.core.utils.io import split_file_args, write_text

from ._output import OutputFormatter

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load configuration honouring ``--config`` and set up logging.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config_path = getattr(args, "config", None)
    cfg = ConfigManager(config_path=Path(config_path) if config_path else None).load_config(validate=True)
    log_cfg = cfg.get("logging") or {}
    log_file = log_cfg.get("file")
    configure_logging(
        level=log_cfg.get("level", "WARNING"),
        log_file=Path(log_file) if log_file else None,
        verbose=bool(getattr(args, "verbose", False)),
    )
    if getattr(args, "json", False):
        suppress_lastresort_in_json_mode()
    return cfg


def layout_from(args: argparse.Namespace, cfg: Dict[str, Any]) -> SettingsLayout:
    """Spreadsheet layout from configuration, overridden by flags."""
    layout = SettingsLayout.from_config(cfg.get("spreadsheet"))
    for attr in ("environment_row", "first_value_row", "setting_name_column", "default_value_column"):
        value = getattr(args, attr, None)
        if value is not None:
            setattr(layout, attr, value)
    return layout


def delimiters_from(args: argparse.Namespace, cfg: Dict[str, Any]) -> TokenDelimiters:
    """Token delimiters from flags, falling back to configuration."""
    start = getattr(args, "token_start", None)
    end = getattr(args, "token_end", None)
    if start or end:
        return TokenDelimiters.from_options(start, end)
    tokens = cfg.get("tokens") or {}
    return TokenDelimiters.from_options(tokens.get("start"), tokens.get("end"))


def build_context(args: argparse.Namespace, cfg: Dict[str, Any]) -> ProcessingContext:
    """Create the session context shared by every input file."""
    processing = cfg.get("processing") or {}
    validation = cfg.get("validation") or {}
    validate_all = bool(getattr(args, "validate", False))

    false_undefines = getattr(args, "false_undefines", None)
    if false_undefines is None:
        false_undefines = bool(processing.get("falseUndefines", False))

    return ProcessingContext(
        properties=PropertyStore(legacy_false_undefines=false_undefines),
        delimiters=delimiters_from(args, cfg),
        preserve_markup=bool(processing.get("preserveMarkup", True)) and not getattr(args, "clean", False),
        no_directives=bool(processing.get("noDirectives", False)) or bool(getattr(args, "no_directives", False)),
        validate_settings_exist=(
            bool(validation.get("settingsExist", False))
            or validate_all
            or bool(getattr(args, "validate_settings", False))
        ),
        validate_xml_well_formed=(
            bool(validation.get("xmlWellFormed", False))
            or validate_all
            or bool(getattr(args, "validate_xml", False))
        ),
        count_usage=bool(getattr(args, "count_report", None)),
        keep_going=bool(processing.get("keepGoing", False)) or bool(getattr(args, "keep_going", False)),
        environment_name=getattr(args, "environment", None) or None,
    )


def settings_sources(args: argparse.Namespace) -> List[SettingsSource]:
    """Spreadsheet/CSV sources followed by custom command sources.

    Raises:
        SettingsSourceError: For unsupported spreadsheet file types
    """
    sources = [create_source(path) for path in split_file_args(getattr(args, "spreadsheets", []))]
    sources.extend(create_source(cmd.strip(), custom=True) for cmd in getattr(args, "custom", []) if cmd.strip())
    return sources


def prompt_for_environment(
    loader: SettingsLoader,
    source: SettingsSource,
    *,
    input_fn: Callable[[str], str] = input,
) -> Optional[str]:
    """Ask the user to pick one of the environments of ``source``."""
    environments = loader.list_environments(source)
    print("Environment name was not passed.")
    print("")
    print("These are the environment columns found in the spreadsheet:")
    for index, name in enumerate(environments):
        print(f" {index} - {name}")
    answer = input_fn("Type the environment # to use and press Enter: ").strip()
    if answer.isdigit() and int(answer) < len(environments):
        return environments[int(answer)]
    return None


def can_prompt(args: argparse.Namespace) -> bool:
    return not getattr(args, "quiet", False) and sys.stdin is not None and sys.stdin.isatty()


def load_settings(
    context: ProcessingContext,
    args: argparse.Namespace,
    loader: SettingsLoader,
    formatter: OutputFormatter,
    *,
    announce: bool = True,
) -> int:
    """Load settings sources then XML settings files into ``context.properties``.

    Failures are recorded as diagnostics on ``context``.

    Returns:
        0 on success, 1 when a source could not be loaded
    """
    try:
        sources = settings_sources(args)
    except SettingsSourceError as e:
        context.add_diagnostic(DiagnosticKind.EXCEPTION, str(e))
        return EXIT_FAILURE

    for source in sources:
        if not source.exists():
            context.add_diagnostic(
                DiagnosticKind.FILE_NOT_FOUND,
                f'Settings data source not found: "{source.path}"',
            )
            return EXIT_FAILURE
        if announce:
            formatter.text(f'Settings data source: "{source.path}"')

        if not context.environment_name and can_prompt(args):
            context.environment_name = prompt_for_environment(loader, source)
        if not context.environment_name:
            context.add_diagnostic(
                DiagnosticKind.EXCEPTION,
                f"Error loading settings from {source.path}, environment name was not supplied.",
            )
            return EXIT_FAILURE

        try:
            context.properties.load(loader.load_properties(source, context.environment_name))
        except (SettingsSourceError, OSError, ValueError) as e:
            context.add_diagnostic(
                DiagnosticKind.EXCEPTION,
                f"Error loading settings from {source.path}, {e}",
            )
            return EXIT_FAILURE

    for settings_file in split_file_args(getattr(args, "settings_files", [])):
        if not Path(settings_file).exists():
            context.add_diagnostic(
                DiagnosticKind.FILE_NOT_FOUND,
                f'Settings XML file not found: "{settings_file}"',
            )
            return EXIT_FAILURE
        if announce:
            formatter.text(f'Settings XML file: "{settings_file}"')
        try:
            context.properties.load(read_settings_file(settings_file, context.environment_name))
        except SettingsSourceError as e:
            context.add_diagnostic(DiagnosticKind.EXCEPTION, f"Error parsing {settings_file}: {e}")
            return EXIT_FAILURE

    return EXIT_SUCCESS


def write_count_report(path: str, store: PropertyStore) -> None:
    """Write the property usage report as ``Property, Count`` CSV."""
    lines = ["Property, Count"]
    lines.extend(f"{key}, {count}" for key, count in store.usage_report())
    write_text(path, "\r\n".join(lines) + "\r\n")


def report_diagnostics(context: ProcessingContext) -> None:
    """Print every recorded diagnostic to stderr."""
    for diagnostic in context.diagnostics:
        print(str(diagnostic), file=sys.stderr)


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "load_config",
    "layout_from",
    "delimiters_from",
    "build_context",
    "settings_sources",
    "prompt_for_environment",
    "can_prompt",
    "load_settings",
    "write_count_report",
    "report_diagnostics",
]
