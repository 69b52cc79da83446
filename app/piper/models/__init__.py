"""Data models for piper.

This module exports the persisted data structures.
"""

from piper.models.history import SessionRecord, create_session_record

__all__ = [
    "SessionRecord",
    "create_session_record",
]
