"""Unit tests for the session history model."""

import json
from datetime import datetime

import pytest
from piper.models.history import SessionRecord, create_session_record


class TestSessionRecord:
    """Tests for SessionRecord."""

    def test_savings(self) -> None:
        record = SessionRecord(
            id="abc",
            timestamp="2026-01-01T00:00:00+00:00",
            original_size_bytes=100,
            compressed_size_bytes=30,
        )
        assert record.savings_bytes == 70

    def test_savings_never_negative(self) -> None:
        record = SessionRecord(id="abc", timestamp="t", original_size_bytes=10, compressed_size_bytes=30)
        assert record.savings_bytes == 0

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"id": ""}, "ID cannot be empty"),
            ({"timestamp": ""}, "Timestamp cannot be empty"),
            ({"original_size_bytes": -1}, "negative"),
        ],
    )
    def test_validation(self, kwargs: dict[str, object], message: str) -> None:
        fields: dict[str, object] = {
            "id": "abc",
            "timestamp": "t",
            "original_size_bytes": 1,
            "compressed_size_bytes": 1,
        }
        fields.update(kwargs)
        with pytest.raises(ValueError, match=message):
            SessionRecord(**fields)  # type: ignore[arg-type]

    def test_json_line_format(self) -> None:
        """A record serialises to one compact JSON object."""
        record = SessionRecord(id="abc", timestamp="t", original_size_bytes=5, compressed_size_bytes=2)

        line = record.to_json_line()

        assert "\n" not in line
        assert json.loads(line) == {
            "id": "abc",
            "timestamp": "t",
            "original_size": 5,
            "compressed_size": 2,
            "savings": 3,
        }
        assert SessionRecord.from_json_line(line + "\n") == record

    def test_missing_field_raises(self) -> None:
        with pytest.raises(KeyError):
            SessionRecord.from_dict({"id": "abc", "timestamp": "t"})


class TestCreateSessionRecord:
    """Tests for create_session_record."""

    def test_generates_id_and_timestamp(self) -> None:
        record = create_session_record(10, 4)

        assert len(record.id) == 12
        assert datetime.fromisoformat(record.timestamp).tzinfo is not None
        assert record.savings_bytes == 6

    def test_ids_unique(self) -> None:
        assert create_session_record(1, 1).id != create_session_record(1, 1).id
