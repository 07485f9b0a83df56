"""Utility modules for dockhand.

This module exports commonly used utility functions.
"""

from dockhand.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from dockhand.utils.shell import (
    CommandResult,
    as_root,
    command_exists,
    command_succeeds,
    is_root,
    run_command,
    run_privileged,
)

__all__ = [
    "CommandResult",
    "as_root",
    "command_exists",
    "command_succeeds",
    "console",
    "err_console",
    "is_root",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_privileged",
    "setup_logging",
]
