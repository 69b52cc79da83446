"""Shared types and utilities for CLI commands.

This module provides the output format enum and the helpers every
command uses to load configuration, build an orchestrator and run a
scan to completion.
"""

from enum import Enum
from pathlib import Path

import typer

from piper.archiver import Archiver
from piper.core.config import ConfigError, PiperConfig, load_config
from piper.core.state import HistoryStore
from piper.filesystem import Crawler, TrashOperator
from piper.jobs import ManagedItem, Orchestrator
from piper.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> PiperConfig:
    """Load the configuration selected by the global ``--config`` option.

    Args:
        ctx: Typer context carrying the global options.

    Returns:
        Validated configuration.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def resolve_root(root: Path | None, config: PiperConfig) -> Path:
    """Pick the scan root from the command line or the configuration."""
    if root is not None:
        return root.expanduser().resolve()
    return config.scan_root


def build_orchestrator(
    config: PiperConfig,
    root: Path,
    *,
    level: int | None = None,
    dry_run: bool = False,
) -> Orchestrator:
    """Wire an orchestrator from configuration and command options.

    Args:
        config: Loaded configuration.
        root: Directory to scan.
        level: Compression level override.
        dry_run: Report deletions without moving anything to the trash.

    Returns:
        A ready orchestrator.

    Raises:
        typer.Exit: If the compression level is out of range.
    """
    try:
        archiver = Archiver(level if level is not None else config.compression_level)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    return Orchestrator(
        root,
        archiver=archiver,
        crawler=Crawler.from_config(config),
        history_sink=HistoryStore(),
        trash=TrashOperator(dry_run=dry_run),
        workers=config.workers,
    )


def run_scan(orchestrator: Orchestrator, *, announce: bool = True) -> list[ManagedItem]:
    """Run a scan job to completion and return the found items.

    Args:
        orchestrator: Idle orchestrator to scan with.
        announce: Print a progress line first (off for machine-readable output).
    """
    if announce:
        print_info(f"Scanning {orchestrator.root} ...")
    orchestrator.start_scan()
    orchestrator.wait_until_idle()
    return list(orchestrator.items)


def select_top(orchestrator: Orchestrator, top: int | None) -> None:
    """Select the ``top`` largest items, or all items when ``top`` is None."""
    if top is None:
        orchestrator.toggle_all()
        return
    for _ in range(min(top, len(orchestrator.items))):
        orchestrator.toggle_selection()
        orchestrator.next()
