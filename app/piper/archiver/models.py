"""Archiver result models."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CompressionResult:
    """Outcome of compressing one file or directory.

    ``compressed_size_bytes == original_size_bytes`` signals that
    compression achieved no savings. The original is untouched in that
    case and ``output_path`` points at it.

    Attributes:
        original_size_bytes: Size before compression (recursive for directories).
        compressed_size_bytes: Size of the committed archive.
        output_path: Path of the archive, or of the untouched original.
    """

    original_size_bytes: int
    compressed_size_bytes: int
    output_path: str

    @property
    def saved_space(self) -> bool:
        """Whether the compressed output replaced the original."""
        return self.compressed_size_bytes < self.original_size_bytes

    @property
    def savings_bytes(self) -> int:
        """Bytes reclaimed by this compression."""
        return self.original_size_bytes - self.compressed_size_bytes
