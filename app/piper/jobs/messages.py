"""Progress messages posted by background jobs.

Workers never touch orchestrator state. They post these immutable
messages onto their job's channel and the control loop applies them.
"""

from dataclasses import dataclass

from piper.archiver.models import CompressionResult
from piper.filesystem.models import CandidateItem


@dataclass(frozen=True, slots=True)
class ScanCompleted:
    """Terminating message of a scan job, carrying every candidate."""

    candidates: tuple[CandidateItem, ...]


@dataclass(frozen=True, slots=True)
class ItemCompressed:
    """One target of a compression job finished without raising."""

    index: int
    result: CompressionResult


@dataclass(frozen=True, slots=True)
class ItemFailed:
    """One target of a compression job raised an error."""

    index: int
    error: str


@dataclass(frozen=True, slots=True)
class CompressionFinished:
    """Terminating message of a compression job."""


@dataclass(frozen=True, slots=True)
class RestoreFinished:
    """Terminating message of a restore job."""

    index: int
    success: bool
    error: str | None = None


JobMessage = ScanCompleted | ItemCompressed | ItemFailed | CompressionFinished | RestoreFinished

TERMINAL_MESSAGES = (ScanCompleted, CompressionFinished, RestoreFinished)


def is_terminal(message: JobMessage) -> bool:
    """Whether a message ends the job that posted it."""
    return isinstance(message, TERMINAL_MESSAGES)
