"""Paths that piper must never report, compress or trash.

Version-control metadata is excluded from crawling outright; the
protected path patterns guard the trash operator against targets
whose removal would be destructive far beyond reclaiming space.
"""

import fnmatch
from pathlib import Path

# Version-control metadata directories. Never reported, never descended.
VCS_DIR_NAMES: frozenset[str] = frozenset({".git", ".hg", ".svn", ".bzr"})

# Protected filesystem path patterns (glob-style).
# Patterns starting with ~ are expanded to the user's home directory
# before matching. Patterns starting with / are matched as-is.
PROTECTED_PATH_PATTERNS: list[str] = [
    "/",
    "~",
    "~/.ssh",
    "~/.ssh/*",
    "~/.gnupg",
    "~/.gnupg/*",
    "~/.config/piper",
    "~/.local/state/piper",
    "~/.local/share/Trash",
    "~/.local/share/Trash/*",
]


def is_vcs_dir(name: str) -> bool:
    """Check if a directory name is version-control metadata.

    Args:
        name: Directory basename.

    Returns:
        True for .git, .hg, .svn and .bzr.
    """
    return name in VCS_DIR_NAMES


def is_protected_path(path: str) -> bool:
    """Check if a filesystem path is protected and must not be removed.

    Any path inside a version-control metadata directory is protected
    as well, regardless of where it lives.

    Args:
        path: Absolute filesystem path to check.

    Returns:
        True if the path matches any protected pattern, False otherwise.
    """
    normalized = str(Path(path))
    if any(is_vcs_dir(part) for part in Path(normalized).parts):
        return True

    home = str(Path.home())
    for pattern in PROTECTED_PATH_PATTERNS:
        expanded = home + pattern[1:] if pattern.startswith("~") else pattern

        if fnmatch.fnmatch(normalized, expanded):
            return True

    return False
