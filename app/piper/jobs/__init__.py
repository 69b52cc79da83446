"""Background job orchestration.

This module provides the single-writer orchestrator that runs scan,
compression and restore jobs on background threads, together with its
item model, progress messages and aggregate scoring.
"""

from piper.jobs.messages import (
    CompressionFinished,
    ItemCompressed,
    ItemFailed,
    RestoreFinished,
    ScanCompleted,
)
from piper.jobs.models import Command, ItemStatus, JobState, ManagedItem
from piper.jobs.orchestrator import Orchestrator
from piper.jobs.scoring import SCORE_FACTOR, compute_score, total_savings

__all__ = [
    "SCORE_FACTOR",
    "Command",
    "CompressionFinished",
    "ItemCompressed",
    "ItemFailed",
    "ItemStatus",
    "JobState",
    "ManagedItem",
    "Orchestrator",
    "RestoreFinished",
    "ScanCompleted",
    "compute_score",
    "total_savings",
]
