"""
xmlpreprocess CLI package.

Provides the command-line interface with auto-discovery of commands from
``cli/commands``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, print_error
from ._args import (
    add_json_flag,
    add_config_flag,
    add_verbose_flag,
    add_settings_args,
    add_layout_args,
    add_token_args,
    add_quiet_flag,
    add_standard_flags,
)

__all__ = [
    # Output formatting
    "OutputFormatter",
    "print_error",
    # Argument helpers
    "add_json_flag",
    "add_config_flag",
    "add_verbose_flag",
    "add_settings_args",
    "add_layout_args",
    "add_token_args",
    "add_quiet_flag",
    "add_standard_flags",
]
