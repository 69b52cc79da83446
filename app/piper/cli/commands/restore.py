"""Restore command implementation.

Decompresses archives produced by ``piper compress`` back into place.
"""

from pathlib import Path
from typing import Annotated

import typer

from piper.archiver import ArchiveError, Archiver, resolve_archive_path
from piper.archiver.naming import is_compressed, is_packed
from piper.utils.formatting import print_error, print_success
from piper.utils.sizes import format_size


def restore(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Archives (or the original paths they replaced) to restore."),
    ],
) -> None:
    """Restore compressed files and directories.

    Each path may name the archive itself (x.log.zst, deps.tar.zst) or the
    original path it replaced, in which case the directory archive is
    preferred over the single file archive. A path with an archive suffix
    counts as an archive only if it exists, so a compressed `x.zst` file
    is found as `x.zst.zst`.

    Examples:
        piper restore build.log.zst
        piper restore ~/src/app/node_modules
    """
    archiver = Archiver()
    failures = 0

    for path in paths:
        archive = path if _is_existing_archive(path) else resolve_archive_path(path)
        try:
            restored_size = archiver.decompress(archive)
        except ArchiveError as e:
            print_error(str(e))
            failures += 1
            continue
        print_success(f"Restored {archive} ({format_size(restored_size)})")

    if failures:
        raise typer.Exit(code=1)


def _is_existing_archive(path: Path) -> bool:
    """Whether a path names an archive on disk rather than an original."""
    return path.is_file() and (is_packed(path) or is_compressed(path))
