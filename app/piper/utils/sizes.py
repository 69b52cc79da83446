"""Byte counting and formatting helpers."""

import logging
import os
import stat
from pathlib import Path

logger = logging.getLogger(__name__)


def tree_size(path: Path | str) -> int:
    """Sum the sizes of all regular files below a directory.

    Walks with an explicit stack and never follows symlinks. Entries
    that cannot be read are skipped, so the result is best-effort.

    Args:
        path: Directory to measure. A regular file yields its own size.

    Returns:
        Total size in bytes.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return 0
    if stat.S_ISREG(st.st_mode):
        return st.st_size
    if not stat.S_ISDIR(st.st_mode):
        return 0

    total = 0
    stack: list[str] = [os.fspath(path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError as e:
            logger.debug("Cannot list %s: %s", current, e)
            continue
    return total


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"
