"""Exceptions raised by the archiver."""


class ArchiveError(Exception):
    """Base exception for compression and decompression failures.

    Attributes:
        path: The file or directory the operation was working on.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ArchiveIOError(ArchiveError):
    """Raised on permission, disk-full, missing-path or existing-target failures."""


class ArchiveFormatError(ArchiveError):
    """Raised when an archive has an unknown suffix or a corrupt stream."""
