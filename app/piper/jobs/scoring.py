"""Aggregate metrics derived from the managed item list.

Both metrics are pure functions of the items, so they do not depend on
the order in which job messages were applied and a restore reverts
previously credited savings automatically.
"""

from collections.abc import Iterable

from piper.jobs.models import ManagedItem

SCORE_FACTOR = 2.6


def compression_ratio(items: Iterable[ManagedItem]) -> float:
    """Ratio of total original size to total effective size.

    Args:
        items: Managed items.

    Returns:
        The ratio, or 0.0 if the effective total is zero.
    """
    original = 0
    effective = 0
    for item in items:
        original += item.original_size_bytes
        effective += item.effective_size_bytes
    if effective == 0:
        return 0.0
    return original / effective


def compute_score(items: Iterable[ManagedItem]) -> float:
    """Weissman-style score: the compression ratio scaled by 2.6."""
    return compression_ratio(items) * SCORE_FACTOR


def total_savings(items: Iterable[ManagedItem]) -> int:
    """Bytes reclaimed across all items."""
    return sum(
        item.original_size_bytes - item.effective_size_bytes
        for item in items
        if item.effective_size_bytes < item.original_size_bytes
    )
