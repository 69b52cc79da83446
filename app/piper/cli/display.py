"""Shared Rich display functions for managed items and results.

Provides reusable table builders and summary printers used by the
scan, compress and clean commands.
"""

from collections.abc import Sequence

from rich.table import Table

from piper.jobs import ItemStatus, ManagedItem, Orchestrator
from piper.utils.formatting import console
from piper.utils.sizes import format_size


def format_item_status(status: ItemStatus) -> str:
    """Render an item status with its theme style."""
    return f"[status.{status.value}]{status.value}[/]"


def create_candidates_table(items: Sequence[ManagedItem], title: str = "Reclaimable Items") -> Table:
    """Create a Rich table listing scan candidates.

    Args:
        items: Items to display, in display order.
        title: Table title.

    Returns:
        Rich Table with Size, Path and Reason columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted", width=4)
    table.add_column("Size", justify="right", width=10)
    table.add_column("Path", overflow="fold")
    table.add_column("Reason", style="muted")

    for position, item in enumerate(items, start=1):
        table.add_row(
            str(position),
            format_size(item.original_size_bytes),
            item.path,
            item.reason,
        )

    return table


def create_results_table(items: Sequence[ManagedItem], title: str = "Results") -> Table:
    """Create a Rich table showing the outcome for each item.

    Args:
        items: Items whose final status should be shown.
        title: Table title.

    Returns:
        Rich Table with Status, Path, Before, After and Message columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=11)
    table.add_column("Path", overflow="fold")
    table.add_column("Before", justify="right", width=10)
    table.add_column("After", justify="right", width=10)
    table.add_column("Message", style="muted")

    for item in items:
        after = "-" if item.compressed_size_bytes is None else format_size(item.compressed_size_bytes)
        table.add_row(
            format_item_status(item.status),
            item.path,
            format_size(item.original_size_bytes),
            after,
            item.error or "",
        )

    return table


def print_summary(orchestrator: Orchestrator) -> None:
    """Print reclaimed space and the aggregate score."""
    console.print(
        f"\nReclaimed [success]{format_size(orchestrator.total_savings)}[/]"
        f"  |  Score [score]{orchestrator.score:.2f}[/]"
    )
