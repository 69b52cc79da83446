"""Atomic zstd compression and restoration of files and directories.

Every operation follows the same commit-or-discard protocol:

1. Stream the new artifact into a temporary file beside the original,
   named after the original's own path.
2. Flush and fsync it, then decide whether to keep it.
3. Keep: rename it to its final name, fsync the directory, and only then
   remove the original. Discard: unlink the temporary file.

A partially written artifact therefore never replaces the original,
and the original is never removed before its replacement is durable.
"""

import logging
import os
import shutil
import tarfile
from pathlib import Path
from typing import BinaryIO

import zstandard

from piper.archiver.errors import ArchiveError, ArchiveFormatError, ArchiveIOError
from piper.archiver.models import CompressionResult
from piper.archiver.naming import (
    compressed_path,
    is_compressed,
    is_packed,
    packed_path,
    restored_path,
    staging_dir,
    temp_path,
)
from piper.core.config import DEFAULT_COMPRESSION_LEVEL
from piper.utils.sizes import tree_size

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 22

# Every zstd frame starts with this magic number
_ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


class Archiver:
    """Compresses and restores single files and whole directories.

    Instances hold no per-call state and may be shared between worker
    threads; each call builds its own zstd context.

    Args:
        level: zstd compression level (1-22).

    Raises:
        ValueError: If the level is out of range.
    """

    def __init__(self, level: int = DEFAULT_COMPRESSION_LEVEL) -> None:
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            msg = f"Compression level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}"
            raise ValueError(msg)
        self._level = level

    @property
    def level(self) -> int:
        """The zstd compression level in use."""
        return self._level

    # =========================================================================
    # Compression
    # =========================================================================

    def compress(self, path: Path | str) -> CompressionResult:
        """Compress a file or directory in place.

        Files become ``<name>.zst``; directories are packed into
        ``<name>.tar.zst``. The original is removed only when the output
        is strictly smaller, otherwise it is left untouched and the
        result reports no savings.

        Args:
            path: File or directory to compress.

        Returns:
            CompressionResult describing the outcome.

        Raises:
            ArchiveIOError: If the path cannot be read, the output cannot be
                written, or an artifact already occupies the output name.
        """
        source = Path(path)
        if source.is_symlink():
            raise ArchiveIOError(f"Refusing to compress symlink: {source}", str(source))
        if source.is_dir():
            return self._compress_directory(source)
        if source.is_file():
            return self._compress_file(source)
        if not source.exists():
            raise ArchiveIOError(f"Path does not exist: {source}", str(source))
        raise ArchiveIOError(f"Not a regular file or directory: {source}", str(source))

    def _compress_file(self, source: Path) -> CompressionResult:
        """Stream-compress one regular file."""
        final = compressed_path(source)
        self._ensure_free(final, source)
        tmp = temp_path(final)
        cctx = zstandard.ZstdCompressor(level=self._level)

        try:
            original_size = source.stat().st_size
            with source.open("rb") as src, tmp.open("wb") as dst:
                cctx.copy_stream(src, dst)
                _sync(dst)
            compressed_size = tmp.stat().st_size
        except (OSError, zstandard.ZstdError) as e:
            _discard(tmp)
            raise ArchiveIOError(f"Failed to compress {source}: {e}", str(source)) from e

        return self._commit(source, tmp, final, original_size, compressed_size)

    def _compress_directory(self, source: Path) -> CompressionResult:
        """Pack a directory into a streamed tar, compressing as it streams."""
        final = packed_path(source)
        self._ensure_free(final, source)
        tmp = temp_path(final)
        cctx = zstandard.ZstdCompressor(level=self._level)

        original_size = tree_size(source)
        try:
            with tmp.open("wb") as raw:
                with (
                    cctx.stream_writer(raw, closefd=False) as writer,
                    tarfile.open(fileobj=writer, mode="w|") as tar,
                ):
                    tar.add(str(source), arcname=source.name)
                _sync(raw)
            compressed_size = tmp.stat().st_size
        except (OSError, tarfile.TarError, zstandard.ZstdError) as e:
            _discard(tmp)
            raise ArchiveIOError(f"Failed to pack {source}: {e}", str(source)) from e

        return self._commit(source, tmp, final, original_size, compressed_size)

    def _commit(
        self,
        source: Path,
        tmp: Path,
        final: Path,
        original_size: int,
        compressed_size: int,
    ) -> CompressionResult:
        """Keep or discard a finished temporary artifact.

        Args:
            source: The original file or directory.
            tmp: The fully written, synced temporary artifact.
            final: Name the artifact takes when kept.
            original_size: Size of the original.
            compressed_size: Size of the temporary artifact.

        Returns:
            CompressionResult describing the outcome.

        Raises:
            ArchiveIOError: If renaming the artifact or removing the original fails.
        """
        if compressed_size >= original_size:
            _discard(tmp)
            logger.debug(
                "No savings for %s (%d >= %d bytes), keeping original",
                source,
                compressed_size,
                original_size,
            )
            return CompressionResult(
                original_size_bytes=original_size,
                compressed_size_bytes=original_size,
                output_path=str(source),
            )

        try:
            os.replace(tmp, final)
        except OSError as e:
            _discard(tmp)
            raise ArchiveIOError(f"Failed to commit {final}: {e}", str(source)) from e
        _sync_dir(final.parent)

        self._remove_original(source, final)

        logger.info(
            "Compressed %s -> %s (%d -> %d bytes)",
            source,
            final,
            original_size,
            compressed_size,
        )
        return CompressionResult(
            original_size_bytes=original_size,
            compressed_size_bytes=compressed_size,
            output_path=str(final),
        )

    @staticmethod
    def _remove_original(source: Path, final: Path) -> None:
        """Remove the original after its replacement was committed.

        If a file cannot be removed, the committed output is removed again
        so exactly one copy remains. A directory that fails part-way keeps
        the archive, which is then the only complete copy.

        Raises:
            ArchiveIOError: If the original cannot be removed.
        """
        if source.is_dir():
            try:
                shutil.rmtree(source)
            except OSError as e:
                raise ArchiveIOError(
                    f"Archived {source} to {final} but could not remove the directory: {e}",
                    str(source),
                ) from e
            return

        try:
            source.unlink()
        except OSError as e:
            _discard(final)
            raise ArchiveIOError(f"Could not remove {source}: {e}", str(source)) from e

    @staticmethod
    def _ensure_free(final: Path, source: Path) -> None:
        """Refuse to overwrite an unrelated artifact at the output name."""
        if final.exists() or final.is_symlink():
            raise ArchiveIOError(f"Output already exists: {final}", str(source))

    # =========================================================================
    # Decompression
    # =========================================================================

    def decompress(self, archive_path: Path | str) -> int:
        """Restore an archive next to itself and delete the archive.

        ``<name>.tar.zst`` is unpacked into its parent directory,
        recreating ``<name>``; ``<name>.zst`` is decompressed to ``<name>``.
        On failure the archive is left untouched and no partial output
        remains.

        Args:
            archive_path: Archive produced by :meth:`compress`.

        Returns:
            Size in bytes of the restored file or directory tree.

        Raises:
            ArchiveFormatError: If the suffix is not recognised or the
                stream is corrupt.
            ArchiveIOError: If the archive cannot be read, the restore
                target already exists, or output cannot be written.
        """
        archive = Path(archive_path)
        if not (is_packed(archive) or is_compressed(archive)):
            raise ArchiveFormatError(f"Unrecognized archive suffix: {archive.name}", str(archive))
        if not archive.is_file():
            raise ArchiveIOError(f"Archive does not exist: {archive}", str(archive))

        target = restored_path(archive)
        if target.exists() or target.is_symlink():
            raise ArchiveIOError(f"Restore target already exists: {target}", str(archive))

        if is_packed(archive):
            self._unpack_directory(archive, target)
            restored_size = tree_size(target)
        else:
            self._decompress_file(archive, target)
            restored_size = target.stat().st_size

        self._remove_archive(archive, target)
        logger.info("Restored %s -> %s (%d bytes)", archive, target, restored_size)
        return restored_size

    def _decompress_file(self, archive: Path, target: Path) -> None:
        """Stream-decompress a single file archive to ``target``."""
        tmp = temp_path(target)
        dctx = zstandard.ZstdDecompressor()

        try:
            with archive.open("rb") as src:
                _check_magic(src, archive)
                with tmp.open("wb") as dst:
                    dctx.copy_stream(src, dst)
                    _sync(dst)
            os.replace(tmp, target)
        except ArchiveError:
            _discard(tmp)
            raise
        except zstandard.ZstdError as e:
            _discard(tmp)
            raise ArchiveFormatError(f"Corrupt archive {archive}: {e}", str(archive)) from e
        except OSError as e:
            _discard(tmp)
            raise ArchiveIOError(f"Failed to decompress {archive}: {e}", str(archive)) from e
        _sync_dir(target.parent)

    def _unpack_directory(self, archive: Path, target: Path) -> None:
        """Unpack a directory archive through a staging directory."""
        staging = staging_dir(archive, target.name)
        dctx = zstandard.ZstdDecompressor()

        try:
            # Leftover from an interrupted restore of this same archive
            if staging.exists():
                shutil.rmtree(staging)
            staging.mkdir()

            with archive.open("rb") as raw:
                _check_magic(raw, archive)
                with (
                    dctx.stream_reader(raw, closefd=False) as reader,
                    tarfile.open(fileobj=reader, mode="r|") as tar,
                ):
                    # Member names stay confined to staging; link targets are kept
                    # as packed, since venvs link to absolute interpreter paths
                    tar.extractall(staging, filter="tar")

            unpacked = staging / target.name
            if not unpacked.is_dir() or unpacked.is_symlink():
                raise ArchiveFormatError(
                    f"Archive {archive} does not contain directory {target.name}",
                    str(archive),
                )
            os.rename(unpacked, target)
        except ArchiveError:
            raise
        except (zstandard.ZstdError, tarfile.TarError) as e:
            raise ArchiveFormatError(f"Corrupt archive {archive}: {e}", str(archive)) from e
        except OSError as e:
            raise ArchiveIOError(f"Failed to unpack {archive}: {e}", str(archive)) from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        _sync_dir(target.parent)

    @staticmethod
    def _remove_archive(archive: Path, target: Path) -> None:
        """Delete the archive once the restored output is in place.

        If the archive cannot be deleted the restored output is removed
        again, leaving the archive as the single copy.

        Raises:
            ArchiveIOError: If the archive cannot be removed.
        """
        try:
            archive.unlink()
        except OSError as e:
            if target.is_dir():
                shutil.rmtree(target, ignore_errors=True)
            else:
                _discard(target)
            raise ArchiveIOError(f"Could not remove archive {archive}: {e}", str(archive)) from e


def _check_magic(stream: BinaryIO, archive: Path) -> None:
    """Reject streams that do not start with a zstd frame.

    Raises:
        ArchiveFormatError: If the magic number is missing.
    """
    head = stream.read(len(_ZSTD_MAGIC))
    if head != _ZSTD_MAGIC:
        raise ArchiveFormatError(f"Not a zstd archive: {archive}", str(archive))
    stream.seek(0)


def _sync(f: BinaryIO) -> None:
    """Flush a file object and force it to durable storage."""
    f.flush()
    os.fsync(f.fileno())


def _sync_dir(directory: Path) -> None:
    """Persist a rename by syncing its directory (POSIX only)."""
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError as e:
        logger.debug("Cannot open %s for sync: %s", directory, e)
        return
    try:
        os.fsync(fd)
    except OSError as e:
        logger.debug("Cannot sync directory %s: %s", directory, e)
    finally:
        os.close(fd)


def _discard(path: Path) -> None:
    """Remove a temporary artifact if it exists."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", path, e)
