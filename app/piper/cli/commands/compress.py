"""Compress command implementation.

Scans the root, then compresses the largest reclaimable items in
parallel and records the session in the history.
"""

from pathlib import Path
from typing import Annotated

import typer

from piper.archiver.archiver import MAX_LEVEL, MIN_LEVEL
from piper.cli.display import create_candidates_table, create_results_table, print_summary
from piper.cli.types import build_orchestrator, get_config, resolve_root, run_scan, select_top
from piper.jobs import ItemStatus
from piper.jobs.orchestrator import NO_SAVINGS_ERROR
from piper.utils.formatting import console, print_info, print_success, print_warning


def compress(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (defaults to the configured scan root)."),
    ] = None,
    level: Annotated[
        int | None,
        typer.Option(
            "--level",
            min=MIN_LEVEL,
            max=MAX_LEVEL,
            help="zstd compression level (overrides the config).",
        ),
    ] = None,
    top: Annotated[
        int | None,
        typer.Option(
            "--top",
            "-t",
            min=1,
            help="Only compress the N largest items.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Compress reclaimable items in place.

    Files become <name>.zst and directories <name>.tar.zst. Items that
    do not shrink are left untouched.
    """
    config = get_config(ctx)
    orchestrator = build_orchestrator(config, resolve_root(root, config), level=level)
    items = run_scan(orchestrator)

    if not items:
        print_success("Nothing to reclaim.")
        return

    select_top(orchestrator, top)
    planned = [item for item in orchestrator.items if item.selected]
    console.print(create_candidates_table(planned, title="Planned Compression"))

    if not yes:
        confirmed = typer.confirm(f"\nCompress {len(planned)} item(s)?", default=False)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    orchestrator.start_compression()
    orchestrator.wait_until_idle()

    attempted = [item for item in orchestrator.items if item.selected]
    console.print(create_results_table(attempted))
    print_summary(orchestrator)

    skipped = [item for item in attempted if item.error == NO_SAVINGS_ERROR]
    if skipped:
        print_info(f"{len(skipped)} item(s) left untouched: {NO_SAVINGS_ERROR}")

    failed = [
        item for item in attempted if item.status is ItemStatus.ERROR and item.error != NO_SAVINGS_ERROR
    ]
    if failed:
        print_warning(f"{len(failed)} item(s) failed to compress.")
        raise typer.Exit(code=1)
