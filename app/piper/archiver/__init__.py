"""Compression and restoration of reclaimable artifacts.

This module provides the atomic zstd archiver, its result model,
the archive naming conventions and the archiver error taxonomy.
"""

from piper.archiver.archiver import Archiver
from piper.archiver.errors import ArchiveError, ArchiveFormatError, ArchiveIOError
from piper.archiver.models import CompressionResult
from piper.archiver.naming import (
    COMPRESSED_SUFFIX,
    PACKED_SUFFIX,
    compressed_path,
    packed_path,
    resolve_archive_path,
    restored_path,
)

__all__ = [
    "COMPRESSED_SUFFIX",
    "PACKED_SUFFIX",
    "ArchiveError",
    "ArchiveFormatError",
    "ArchiveIOError",
    "Archiver",
    "CompressionResult",
    "compressed_path",
    "packed_path",
    "resolve_archive_path",
    "restored_path",
]
