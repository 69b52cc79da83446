"""Utility modules for piper.

This module exports commonly used utility functions.
"""

from piper.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from piper.utils.sizes import format_size, tree_size

__all__ = [
    "console",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "tree_size",
]
