"""
xmlpreprocess property command.

SUMMARY: Print the resolved value of one property
"""

from __future__ import annotations

import argparse
import re
import sys
from typing import List

from xmlpreprocess.cli import OutputFormatter, add_layout_args, add_settings_args, add_standard_flags, add_token_args
from xmlpreprocess.cli._utils import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    build_context,
    layout_from,
    load_config,
    load_settings,
    report_diagnostics,
)
from xmlpreprocess.core.exceptions import XmlPreprocessError
from xmlpreprocess.core.settings import SettingsLoader

SUMMARY = "Print the resolved value of one property"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Property name")
    parser.add_argument(
        "-t", "--delimiters",
        dest="delimiters",
        help="Split the value on any of these characters and print one item per line",
    )
    add_settings_args(parser)
    add_layout_args(parser)
    add_token_args(parser)
    add_standard_flags(parser)


def split_value(value: str, delimiters: str) -> List[str]:
    """Split ``value`` on every character of ``delimiters``, trimming items."""
    pattern = "[" + re.escape(delimiters) + "]"
    return [item.strip() for item in re.split(pattern, value)]


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        cfg = load_config(args)
    except XmlPreprocessError as e:
        formatter.error(e, error_code="config_error")
        return EXIT_FAILURE

    # Extraction never prompts and prints nothing but the value.
    args.quiet = True
    context = build_context(args, cfg)
    loader = SettingsLoader(layout_from(args, cfg))
    if load_settings(context, args, loader, formatter, announce=False) != EXIT_SUCCESS:
        if formatter.json_mode:
            formatter.json_output({"diagnostics": [d.to_dict() for d in context.diagnostics]})
        else:
            report_diagnostics(context)
        return EXIT_FAILURE
    context.properties.add_definitions(args.defines, context.delimiters)

    prop = context.properties.get(args.name)
    try:
        value = context.resolve_content(prop.value) if prop is not None else None
    except XmlPreprocessError as e:
        formatter.error(e, error_code="undefined_setting")
        return EXIT_FAILURE

    items: List[str] = []
    if value:
        items = split_value(value, args.delimiters) if args.delimiters else [value]

    if formatter.json_mode:
        formatter.json_output({"name": args.name, "value": value, "items": items})
    else:
        for item in items:
            formatter.text(item)
    return EXIT_SUCCESS


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
