"""
xmlpreprocess run command.

SUMMARY: Preprocess XML/text files against environment settings
"""

from __future__ import annotations

import argparse
import sys

from xmlpreprocess.cli import (
    OutputFormatter,
    add_layout_args,
    add_quiet_flag,
    add_settings_args,
    add_standard_flags,
    add_token_args,
)
from xmlpreprocess.cli._utils import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    build_context,
    layout_from,
    load_config,
    load_settings,
    report_diagnostics,
    write_count_report,
)
from xmlpreprocess.core.exceptions import XmlPreprocessError
from xmlpreprocess.core.preprocess import Preprocessor
from xmlpreprocess.core.settings import SettingsLoader
from xmlpreprocess.core.utils.io import expand_file_args, split_file_args, write_text

SUMMARY = "Preprocess XML/text files against environment settings"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--input",
        dest="inputs",
        action="append",
        default=[],
        metavar="FILE",
        help="Input file (repeatable, ';'-separated, wildcards allowed)",
    )
    parser.add_argument(
        "-o", "--output",
        dest="outputs",
        action="append",
        default=[],
        metavar="FILE",
        help="Output file paired with the input at the same position (default: rewrite the input)",
    )
    add_settings_args(parser)
    add_layout_args(parser)
    add_token_args(parser)

    modes = parser.add_argument_group("processing")
    modes.add_argument("-c", "--clean", action="store_true", help="Remove directive markup from the output")
    modes.add_argument(
        "-n", "--no-directives",
        action="store_true",
        help="Only replace tokens; ignore ifdef/else/endif blocks",
    )
    modes.add_argument("-v", "--validate", action="store_true", help="Both --validate-settings and --validate-xml")
    modes.add_argument(
        "--validate-settings",
        action="store_true",
        help="Fail (exit 2, nothing written) when a referenced setting is missing",
    )
    modes.add_argument("--validate-xml", action="store_true", help="Fail when the output is not well-formed XML")
    modes.add_argument("--keep-going", action="store_true", help="Process remaining files after a failure")
    modes.add_argument("--count-report", metavar="CSV", help="Write property usage counts to CSV")
    modes.add_argument(
        "--environment-file",
        metavar="FILE",
        help="Write the selected environment name to FILE and exit",
    )
    add_quiet_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    """Load settings and preprocess every input file."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        cfg = load_config(args)
    except XmlPreprocessError as e:
        formatter.error(e, error_code="config_error")
        return EXIT_FAILURE

    context = build_context(args, cfg)
    loader = SettingsLoader(layout_from(args, cfg))

    exit_code = load_settings(context, args, loader, formatter)

    if exit_code == EXIT_SUCCESS and args.environment_file:
        formatter.text(f'Writing selected environment "{context.environment_name}" to {args.environment_file}')
        write_text(args.environment_file, context.environment_name or "")
        return exit_code

    if exit_code == EXIT_SUCCESS:
        # Command-line definitions override every settings source.
        context.properties.add_definitions(args.defines, context.delimiters)
        inputs = expand_file_args(args.inputs)
        outputs = split_file_args(args.outputs)
        if not inputs:
            formatter.error("No input files given", error_code="missing_input")
            return EXIT_FAILURE
        exit_code = Preprocessor().run(inputs, outputs, context)

    if args.count_report:
        write_count_report(args.count_report, context.properties)

    if formatter.json_mode:
        formatter.json_output({"exitCode": exit_code, "environment": context.environment_name, **context.summary()})
    else:
        report_diagnostics(context)
    return exit_code


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
