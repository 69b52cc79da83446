"""History command for viewing past compression sessions.

This module provides the `piper history` command for viewing the
sessions recorded by `piper compress`.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from piper.core.state import HistoryStore
from piper.models.history import SessionRecord
from piper.utils.formatting import console, print_info
from piper.utils.sizes import format_size

app = typer.Typer(
    name="history",
    help="View history of compression sessions.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of sessions to show.",
        ),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of compression sessions.

    Examples:
        piper history              # Show last 20 sessions
        piper history -n 50        # Show last 50 sessions
        piper history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    store = HistoryStore()
    records = store.get_history(limit=limit)

    if not records:
        print_info("No compression sessions recorded yet.")
        return

    if json_output:
        _print_json(records)
    else:
        _print_table(records)
        console.print(f"\n[dim]Total reclaimed: {format_size(store.total_savings())}[/dim]")


def _print_table(records: list[SessionRecord]) -> None:
    """Print sessions as a Rich table.

    Args:
        records: Sessions to display, newest first.
    """
    table = Table(
        title="Compression History",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Original", justify="right")
    table.add_column("Compressed", justify="right")
    table.add_column("Saved", justify="right", style="success")

    for record in records:
        table.add_row(
            record.id[:8],
            _format_timestamp(record.timestamp),
            format_size(record.original_size_bytes),
            format_size(record.compressed_size_bytes),
            format_size(record.savings_bytes),
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display (YYYY-MM-DD HH:MM)."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")


def _print_json(records: list[SessionRecord]) -> None:
    """Print sessions as JSON for scripting."""
    console.print_json(json.dumps([record.to_dict() for record in records]))
