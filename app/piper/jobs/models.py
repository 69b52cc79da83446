"""Job orchestration models.

This module defines the managed item tracked by the orchestrator,
its lifecycle statuses, the job state and the command surface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from piper.filesystem.models import CandidateItem


class ItemStatus(Enum):
    """Lifecycle status of a managed item.

    ``COMPRESSING`` is the busy marker for both compression and restore.
    ``DELETED`` is terminal.
    """

    FOUND = "found"
    COMPRESSING = "compressing"
    DONE = "done"
    ERROR = "error"
    RESTORED = "restored"
    DELETED = "deleted"


class JobState(Enum):
    """The single background job currently running, if any."""

    IDLE = "idle"
    SCANNING = "scanning"
    COMPRESSING = "compressing"
    RESTORING = "restoring"


class Command(Enum):
    """Discrete commands accepted by the orchestrator."""

    SCAN = "scan"
    COMPRESS = "compress"
    DELETE = "delete"
    RESTORE = "restore"
    NEXT = "next"
    PREVIOUS = "previous"
    TOGGLE_SELECTION = "toggle_selection"
    TOGGLE_ALL = "toggle_all"


@dataclass(slots=True)
class ManagedItem:
    """A candidate under orchestrator control.

    Only the orchestrator's control loop mutates managed items.
    ``original_size_bytes`` is fixed at creation.

    Attributes:
        path: Absolute path of the original file or directory.
        original_size_bytes: Size reported by the crawler.
        reason: Why the crawler reported this item.
        status: Current lifecycle status.
        compressed_size_bytes: Committed archive size, 0 once deleted,
            None while uncompressed.
        selected: Whether the item is part of the current selection.
        error: Last error message, if the item failed.
    """

    path: str
    original_size_bytes: int
    reason: str
    status: ItemStatus = field(default=ItemStatus.FOUND)
    compressed_size_bytes: int | None = field(default=None)
    selected: bool = field(default=False)
    error: str | None = field(default=None)

    @classmethod
    def from_candidate(cls, candidate: CandidateItem) -> ManagedItem:
        """Create a fresh managed item from a crawler candidate."""
        return cls(
            path=candidate.path,
            original_size_bytes=candidate.size_bytes,
            reason=candidate.reason,
        )

    @property
    def effective_size_bytes(self) -> int:
        """Bytes this item currently occupies on disk."""
        if self.compressed_size_bytes is None:
            return self.original_size_bytes
        return self.compressed_size_bytes
