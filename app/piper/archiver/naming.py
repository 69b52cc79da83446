"""Archive and temporary file naming.

Every name is derived from the item's own path, so concurrent
operations on different items can never collide on a file.
"""

from pathlib import Path

# Single file compressed with zstd
COMPRESSED_SUFFIX = ".zst"
# Directory packed with tar, then compressed with zstd
PACKED_SUFFIX = ".tar.zst"
# Work in progress, never a committed artifact
TEMP_SUFFIX = ".piper-tmp"
RESTORE_STAGING_SUFFIX = ".piper-restore"


def compressed_path(path: Path) -> Path:
    """Final name of a compressed file: ``<name>.zst``."""
    return path.with_name(path.name + COMPRESSED_SUFFIX)


def packed_path(path: Path) -> Path:
    """Final name of a packed directory: ``<name>.tar.zst``."""
    return path.with_name(path.name + PACKED_SUFFIX)


def temp_path(final: Path) -> Path:
    """Temporary name used while writing ``final``."""
    return final.with_name(final.name + TEMP_SUFFIX)


def staging_dir(archive: Path, restored_name: str) -> Path:
    """Hidden directory beside ``archive`` used to unpack before committing."""
    return archive.with_name(f".{restored_name}{RESTORE_STAGING_SUFFIX}")


def is_packed(path: Path) -> bool:
    """Whether ``path`` carries the packed directory suffix."""
    return path.name.endswith(PACKED_SUFFIX) and len(path.name) > len(PACKED_SUFFIX)


def is_compressed(path: Path) -> bool:
    """Whether ``path`` carries the single file suffix."""
    return path.name.endswith(COMPRESSED_SUFFIX) and len(path.name) > len(COMPRESSED_SUFFIX)


def restored_path(archive: Path) -> Path:
    """Path an archive restores to, with its suffix stripped.

    Raises:
        ValueError: If the archive has no recognised suffix.
    """
    if is_packed(archive):
        return archive.with_name(archive.name.removesuffix(PACKED_SUFFIX))
    if is_compressed(archive):
        return archive.with_name(archive.name.removesuffix(COMPRESSED_SUFFIX))
    msg = f"Unrecognized archive suffix: {archive.name}"
    raise ValueError(msg)


def resolve_archive_path(path: Path) -> Path:
    """Find the archive an original path was compressed into.

    A packed directory archive is preferred when it exists, otherwise
    the single file form is returned.

    Args:
        path: Path of the original file or directory.

    Returns:
        ``<path>.tar.zst`` if it exists, else ``<path>.zst``.
    """
    packed = packed_path(path)
    if packed.exists():
        return packed
    return compressed_path(path)
