"""Utility modules for dotctl.

This module exports commonly used utility functions.
"""

from dotctl.utils.formatting import (
    configure_logging,
    console,
    err_console,
    print_error,
    print_info,
    print_panel,
    print_success,
    print_warning,
)
from dotctl.utils.shell import CommandResult, command_exists, run_command, run_interactive

__all__ = [
    "CommandResult",
    "command_exists",
    "configure_logging",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_panel",
    "print_success",
    "print_warning",
    "run_command",
    "run_interactive",
]
