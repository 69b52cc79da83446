"""Heuristics deciding what counts as reclaimable.

Rules are evaluated in priority order and the first match wins:

1. A directory named like a heavy dependency marker (``node_modules``,
   ``target``, ``venv``, ``.venv``) is one atomic candidate sized by
   the sum of all regular files below it.
2. A regular file with a stale-artifact extension, larger than the
   size threshold and not accessed within the staleness window is a
   stale log candidate.
3. Anything else is not a candidate.

Version-control metadata directories are excluded before any rule runs.
"""

from __future__ import annotations

import os
import stat
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from piper.core.config import (
    DEFAULT_HEAVY_MARKERS,
    DEFAULT_STALE_EXTENSIONS,
    MIB,
)
from piper.filesystem.models import CandidateItem, Traversal
from piper.filesystem.protected import is_vcs_dir
from piper.utils.sizes import tree_size

if TYPE_CHECKING:
    from piper.core.config import PiperConfig

SECONDS_PER_DAY = 24 * 60 * 60


def heavy_reason(name: str) -> str:
    """Reason tag for a heavy dependency folder."""
    return f"heavy dependency folder: `{name}`"


def stale_reason(age_days: int) -> str:
    """Reason tag for a stale log file."""
    return f"stale log file (>{age_days} days)"


class Classifier:
    """Decides whether a single filesystem entry is a reclaimable candidate.

    The classifier holds no state besides its configuration and is safe
    to share between crawler worker threads.

    Args:
        heavy_markers: Directory names treated as whole-unit candidates.
        stale_extensions: File extensions (without dot) eligible as stale logs.
        stale_min_size_bytes: Stale files must be strictly larger than this.
        stale_age_days: Stale files must be last accessed strictly longer ago.
        clock: Returns the current time as a UNIX timestamp.
    """

    def __init__(
        self,
        *,
        heavy_markers: Iterable[str] = DEFAULT_HEAVY_MARKERS,
        stale_extensions: Iterable[str] = DEFAULT_STALE_EXTENSIONS,
        stale_min_size_bytes: int = MIB,
        stale_age_days: int = 30,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._heavy_markers = frozenset(heavy_markers)
        self._stale_extensions = frozenset(ext.lstrip(".") for ext in stale_extensions)
        self._stale_min_size = stale_min_size_bytes
        self._stale_age_days = stale_age_days
        self._clock = clock

    @classmethod
    def from_config(cls, config: PiperConfig) -> Classifier:
        """Build a classifier from the user configuration."""
        return cls(
            heavy_markers=config.heavy_markers,
            stale_extensions=config.stale_extensions,
            stale_min_size_bytes=config.stale_min_size_bytes,
            stale_age_days=config.stale_age_days,
        )

    def has_stale_extension(self, name: str) -> bool:
        """Whether a file name carries a stale-artifact extension.

        Needs only the name, so the crawler can skip most files without
        a stat.
        """
        extension = os.path.splitext(name)[1].lstrip(".")
        return bool(extension) and extension in self._stale_extensions

    def traversal(self, name: str) -> Traversal:
        """Decide how the crawler treats a directory with the given name.

        Args:
            name: Directory basename.

        Returns:
            EXCLUDE for version-control metadata, PRUNE for heavy
            dependency markers, DESCEND otherwise.
        """
        if is_vcs_dir(name):
            return Traversal.EXCLUDE
        if name in self._heavy_markers:
            return Traversal.PRUNE
        return Traversal.DESCEND

    def classify(self, path: str, *, is_dir: bool) -> CandidateItem | None:
        """Classify one entry, reading whatever metadata the rules need.

        For heavy dependency folders this walks the whole subtree to
        compute its size, which is the expensive part of a crawl.

        Args:
            path: Absolute path of the entry.
            is_dir: Whether the entry is a (non-symlink) directory.

        Returns:
            A CandidateItem, or None if the entry is not reclaimable.

        Raises:
            OSError: If the entry's metadata cannot be read.
        """
        name = os.path.basename(path)
        if is_dir:
            if self.traversal(name) is Traversal.PRUNE:
                return CandidateItem(path=path, size_bytes=tree_size(path), reason=heavy_reason(name))
            return None

        return self.classify_file(path, os.lstat(path))

    def classify_file(self, path: str, st: os.stat_result) -> CandidateItem | None:
        """Apply the stale log rule to a file's stat result.

        Args:
            path: Absolute path of the file.
            st: Result of ``lstat`` on the file.

        Returns:
            A CandidateItem if the file is a stale log, None otherwise.
        """
        if not stat.S_ISREG(st.st_mode):
            return None

        if not self.has_stale_extension(os.path.basename(path)):
            return None

        if st.st_size <= self._stale_min_size:
            return None

        idle_seconds = self._clock() - st.st_atime
        if idle_seconds <= self._stale_age_days * SECONDS_PER_DAY:
            return None

        return CandidateItem(
            path=path,
            size_bytes=st.st_size,
            reason=stale_reason(self._stale_age_days),
        )
