"""Console output helpers.

Results go to stdout so they can be piped; warnings, errors and log
records go to stderr.
"""

import sys
from typing import TextIO

from rich.console import Console

from piper.core.theme import get_theme


def _make_console(stream: TextIO, *, stderr: bool = False) -> Console:
    # Hex theme colors need truecolor on a terminal
    color_system = "truecolor" if stream.isatty() else "auto"
    return Console(theme=get_theme(), stderr=stderr, color_system=color_system)


console = _make_console(sys.stdout)
err_console = _make_console(sys.stderr, stderr=True)


def print_info(message: str) -> None:
    """Print a neutral progress or status line."""
    console.print(f"[info]{message}[/]")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning to stderr."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error to stderr."""
    err_console.print(f"[error]Error:[/] {message}")
