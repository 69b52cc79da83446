"""Filesystem domain models for the crawler.

This module defines the data structures produced while crawling a
directory tree for reclaimable artifacts.
"""

from dataclasses import dataclass
from enum import Enum


class Traversal(str, Enum):
    """What the crawler should do with a directory it just listed.

    Attributes:
        DESCEND: Ordinary directory, push its children onto the worklist.
        PRUNE: Whole-unit candidate, analyse it but never descend into it.
        EXCLUDE: Never report and never descend (version-control metadata).
    """

    DESCEND = "descend"
    PRUNE = "prune"
    EXCLUDE = "exclude"


@dataclass(frozen=True, slots=True)
class CandidateItem:
    """A reclaimable filesystem entry found by the crawler.

    Attributes:
        path: Absolute filesystem path.
        size_bytes: Size in bytes (recursive for directories).
        reason: Human-readable reason the entry was selected.
    """

    path: str
    size_bytes: int
    reason: str

    def __post_init__(self) -> None:
        """Validate candidate data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)
