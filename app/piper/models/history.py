"""Session history model.

Each finished compression session is recorded as a single entry with
the byte totals it processed, so savings can be reported over time.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Totals of one finished compression session.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the session finished (ISO 8601 format with timezone).
        original_size_bytes: Sum of original sizes of successfully compressed items.
        compressed_size_bytes: Sum of their compressed sizes.
    """

    id: str
    timestamp: str
    original_size_bytes: int
    compressed_size_bytes: int

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.id:
            msg = "Session record ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if self.original_size_bytes < 0 or self.compressed_size_bytes < 0:
            msg = "Session sizes cannot be negative"
            raise ValueError(msg)

    @property
    def savings_bytes(self) -> int:
        """Bytes reclaimed by the session (never negative)."""
        return max(self.original_size_bytes - self.compressed_size_bytes, 0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the record.
        """
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "original_size": self.original_size_bytes,
            "compressed_size": self.compressed_size_bytes,
            "savings": self.savings_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionRecord:
        """Deserialize from dictionary.

        ``savings`` is derived, so a stored value is ignored.

        Args:
            data: Dictionary containing record data.

        Returns:
            SessionRecord instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If sizes are invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            original_size_bytes=int(data["original_size"]),
            compressed_size_bytes=int(data["compressed_size"]),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> SessionRecord:
        """Deserialize from JSON line.

        Args:
            line: Single JSON line (with or without trailing whitespace).

        Returns:
            SessionRecord instance.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_session_record(original_size_bytes: int, compressed_size_bytes: int) -> SessionRecord:
    """Factory function to create a new SessionRecord.

    Automatically generates a unique ID and current timestamp.

    Args:
        original_size_bytes: Total original bytes of the session.
        compressed_size_bytes: Total compressed bytes of the session.

    Returns:
        New SessionRecord with auto-generated ID and timestamp.
    """
    return SessionRecord(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        original_size_bytes=original_size_bytes,
        compressed_size_bytes=compressed_size_bytes,
    )
