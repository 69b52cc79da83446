"""Scan command implementation.

Lists reclaimable artifacts below the scan root without changing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from piper.cli.display import create_candidates_table
from piper.cli.types import OutputFormat, build_orchestrator, get_config, resolve_root, run_scan
from piper.jobs import ManagedItem
from piper.utils.formatting import console, print_error, print_success
from piper.utils.sizes import format_size


def scan(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (defaults to the configured scan root)."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-l",
            min=1,
            help="Limit number of results.",
        ),
    ] = None,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export results to JSON file.",
        ),
    ] = None,
) -> None:
    """Scan for dependency folders and stale logs.

    Examples:
        piper scan                  # Scan the configured root
        piper scan ~/src -l 10      # Ten largest items below ~/src
        piper scan --format json    # JSON output for scripting
    """
    config = get_config(ctx)
    orchestrator = build_orchestrator(config, resolve_root(root, config))
    items = run_scan(orchestrator, announce=output_format == OutputFormat.TABLE)

    if not items:
        print_success("Nothing to reclaim.")
        return

    display_items = items[:limit] if limit else items

    if export_path is not None:
        _export_results(items, export_path)  # Export ALL, not limited

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(_to_dicts(display_items)))
        return

    console.print(create_candidates_table(display_items))

    total_size = sum(item.original_size_bytes for item in items)
    console.print(f"\n[dim]Found {len(items)} reclaimable items ({format_size(total_size)} total)[/dim]")
    if limit and len(display_items) < len(items):
        console.print(f"[dim](showing {len(display_items)} of {len(items)}, limited to {limit})[/dim]")


def _to_dicts(items: list[ManagedItem]) -> list[dict[str, object]]:
    return [
        {
            "path": item.path,
            "size_bytes": item.original_size_bytes,
            "reason": item.reason,
        }
        for item in items
    ]


def _export_results(items: list[ManagedItem], export_path: Path) -> None:
    """Export scan results to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.write_text(json.dumps(_to_dicts(items), indent=2), encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to export results: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"Exported {len(items)} items to {export_path}")
