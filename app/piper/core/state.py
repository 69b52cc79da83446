"""State management for session history.

This module provides the HistoryStore class for persisting and querying
finished compression sessions in a JSONL file format.
"""

import json
import logging
from pathlib import Path

from piper.core.paths import ensure_state_dir, get_state_dir
from piper.models.history import SessionRecord, create_session_record

logger = logging.getLogger(__name__)


class HistoryStore:
    """Manages session history in a JSONL file.

    Storage location: ~/.local/state/piper/history.jsonl

    Each line is a complete JSON object representing a SessionRecord,
    which keeps writes append-only. The store is the persistence sink
    handed to the job orchestrator via :meth:`record_session`.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize HistoryStore.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/piper
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to the history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record_session(self, original_size_bytes: int, compressed_size_bytes: int) -> None:
        """Record the totals of one finished compression session.

        Args:
            original_size_bytes: Total original bytes of the session.
            compressed_size_bytes: Total compressed bytes of the session.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        self.append(create_session_record(original_size_bytes, compressed_size_bytes))

    def append(self, record: SessionRecord) -> None:
        """Append a record to the history file.

        Creates file and parent directories if they don't exist.

        Args:
            record: The session record to store.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(record.to_json_line() + "\n")
            f.flush()

    def get_history(self, limit: int | None = None) -> list[SessionRecord]:
        """Read session records, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of records to return.
                  If None, returns all records.

        Returns:
            List of SessionRecord, newest first.
            Returns empty list if file doesn't exist.
        """
        if not self.history_path.exists():
            return []

        records: list[SessionRecord] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    records.append(SessionRecord.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                    logger.warning(
                        "Skipping corrupt history line %d: %s",
                        line_num,
                        str(e),
                    )

        records.reverse()

        if limit is not None:
            return records[:limit]

        return records

    def total_savings(self) -> int:
        """Sum of bytes reclaimed over all recorded sessions."""
        return sum(record.savings_bytes for record in self.get_history())
