"""Parallel crawler for reclaimable artifacts.

Walks a directory tree with an explicit worklist, hands every entry
that may be a candidate to a bounded thread pool for classification
and returns the candidates biggest first. The walk itself is a single
sequential iterator, only the per-entry analysis runs in parallel.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from piper.filesystem.classifier import Classifier
from piper.filesystem.models import CandidateItem, Traversal

if TYPE_CHECKING:
    from piper.core.config import PiperConfig

logger = logging.getLogger(__name__)

# In-flight analysis tasks allowed per worker thread
_QUEUE_FACTOR = 4


class Crawler:
    """Finds reclaimable candidates below a root directory.

    The crawl is best-effort: entries or directories that cannot be read
    are skipped and never abort the crawl. Symlinks are never followed
    and the root itself is never reported.

    Args:
        classifier: Decision function applied to every entry.
        workers: Maximum number of analysis threads (None = executor default).
    """

    def __init__(self, classifier: Classifier | None = None, *, workers: int | None = None) -> None:
        self._classifier = classifier if classifier is not None else Classifier()
        self._workers = workers

    @classmethod
    def from_config(cls, config: PiperConfig) -> Crawler:
        """Build a crawler from the user configuration."""
        return cls(Classifier.from_config(config), workers=config.workers)

    def crawl(self, root: Path | str) -> list[CandidateItem]:
        """Crawl a directory tree for reclaimable candidates.

        Args:
            root: Directory to crawl.

        Returns:
            Candidates sorted by size, largest first. Empty if the root
            is missing or unreadable.
        """
        root_path = os.path.abspath(os.fspath(root))
        if not os.path.isdir(root_path):
            logger.warning("Scan root is not a readable directory: %s", root_path)
            return []

        results: list[CandidateItem] = []
        errors: list[BaseException] = []
        lock = threading.Lock()
        workers = self._workers or min(32, (os.cpu_count() or 1) + 4)
        # Bounds queued work so the walker cannot race ahead of the pool
        slots = threading.BoundedSemaphore(workers * _QUEUE_FACTOR)

        def analyse(path: str, is_dir: bool) -> None:
            try:
                item = self._classifier.classify(path, is_dir=is_dir)
            except OSError as e:
                logger.debug("Skipping %s: %s", path, e)
                return
            if item is not None:
                with lock:
                    results.append(item)

        def done(future: Future[None]) -> None:
            slots.release()
            error = future.exception()
            if error is not None:
                with lock:
                    errors.append(error)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="piper-crawl") as pool:
            for path, is_dir in self._walk(root_path):
                slots.acquire()
                pool.submit(analyse, path, is_dir).add_done_callback(done)

        # Surface programming errors from workers instead of losing them
        if errors:
            raise errors[0]

        results.sort(key=lambda item: item.size_bytes, reverse=True)
        logger.debug("Crawl of %s found %d candidate(s)", root_path, len(results))
        return results

    def _walk(self, root: str) -> Iterator[tuple[str, bool]]:
        """Yield entries that need classification, pruning as it goes.

        Ordinary directories go onto the worklist instead of being
        yielded; heavy dependency directories are yielded once and not
        descended; excluded directories are dropped entirely. Files are
        yielded only when their name has a stale extension.

        Args:
            root: Absolute path of the crawl root.

        Yields:
            Tuples of (path, is_dir).
        """
        stack: list[str] = [root]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                logger.debug("Cannot list %s: %s", current, e)
                continue

            for entry in entries:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    continue

                if not is_dir:
                    if self._classifier.has_stale_extension(entry.name):
                        yield entry.path, False
                    continue

                traversal = self._classifier.traversal(entry.name)
                if traversal is Traversal.DESCEND:
                    stack.append(entry.path)
                elif traversal is Traversal.PRUNE:
                    yield entry.path, True
