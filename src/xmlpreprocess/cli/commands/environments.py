"""
xmlpreprocess environments command.

SUMMARY: List the environments of a settings source
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List

from xmlpreprocess.cli import OutputFormatter, add_layout_args, add_settings_args, add_standard_flags
from xmlpreprocess.cli._utils import EXIT_FAILURE, EXIT_SUCCESS, build_context, layout_from, load_config, settings_sources
from xmlpreprocess.core.exceptions import XmlPreprocessError
from xmlpreprocess.core.settings import SettingsLoader

SUMMARY = "List the environments of a settings source"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p", "--property",
        dest="property",
        help="Print this property's resolved value for every environment instead",
    )
    add_settings_args(parser)
    add_layout_args(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Print environment names (or one property per environment) of the first source."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        cfg = load_config(args)
        sources = settings_sources(args)
        if not sources:
            formatter.error("No settings source given (use -x or --custom)", error_code="missing_source")
            return EXIT_FAILURE

        context = build_context(args, cfg)
        loader = SettingsLoader(layout_from(args, cfg))
        table = loader.load_table(sources[0])
        environments = loader.environments(table)

        results: List[Dict[str, Any]] = []
        for environment in environments:
            if not args.property:
                results.append({"environment": environment})
                formatter.text(environment)
                continue
            context.properties.load(loader.properties_from_table(table, environment))
            prop = context.properties.get(args.property)
            value = context.resolve_content(prop.value) if prop is not None else None
            results.append({"environment": environment, "value": value})
            if value:
                formatter.text(value)
    except (XmlPreprocessError, OSError) as e:
        formatter.error(e, error_code="environments_error")
        return EXIT_FAILURE

    if formatter.json_mode:
        formatter.json_output({"source": sources[0].path, "property": args.property, "environments": results})
    return EXIT_SUCCESS


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
