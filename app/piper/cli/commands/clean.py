"""Clean command implementation.

Scans the root and moves reclaimable items to the trash.
"""

from pathlib import Path
from typing import Annotated

import typer

from piper.cli.display import create_candidates_table, create_results_table, print_summary
from piper.cli.types import build_orchestrator, get_config, resolve_root, run_scan, select_top
from piper.jobs import ItemStatus
from piper.utils.formatting import console, print_info, print_success, print_warning


def clean(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (defaults to the configured scan root)."),
    ] = None,
    top: Annotated[
        int | None,
        typer.Option(
            "--top",
            "-t",
            min=1,
            help="Only trash the N largest items.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be trashed."),
    ] = False,
) -> None:
    """Move reclaimable items to the trash."""
    config = get_config(ctx)
    orchestrator = build_orchestrator(config, resolve_root(root, config), dry_run=dry_run)
    items = run_scan(orchestrator)

    if not items:
        print_success("Nothing to reclaim.")
        return

    select_top(orchestrator, top)
    planned = [item for item in orchestrator.items if item.selected]
    title = "Planned Deletion (Dry Run)" if dry_run else "Planned Deletion"
    console.print(create_candidates_table(planned, title=title))

    if not dry_run and not yes:
        confirmed = typer.confirm(f"\nMove {len(planned)} item(s) to the trash?", default=False)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    orchestrator.delete()

    if dry_run:
        print_info(f"Dry run: {len(planned)} item(s) would be moved to the trash.")
        return

    console.print(create_results_table(planned))
    print_summary(orchestrator)

    failed = [item for item in planned if item.status is ItemStatus.ERROR]
    if failed:
        print_warning(f"{len(failed)} item(s) could not be trashed.")
        raise typer.Exit(code=1)
