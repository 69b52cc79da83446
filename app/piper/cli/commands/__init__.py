"""CLI commands for piper.

This package contains all subcommand implementations.
"""

from piper.cli.commands import clean, compress, config, history, restore, scan

__all__ = ["clean", "compress", "config", "history", "restore", "scan"]
