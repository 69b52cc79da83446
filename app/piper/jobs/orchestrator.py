"""Single-writer job orchestrator.

The orchestrator owns the managed item list and the job state. Commands
arrive on the control loop; filesystem-heavy work runs on background
threads that report back through one channel per job. Only ``tick``
applies those reports, so the item list has exactly one writer.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from piper.archiver import ArchiveError, Archiver, CompressionResult, resolve_archive_path
from piper.filesystem.crawler import Crawler
from piper.filesystem.models import CandidateItem
from piper.filesystem.trash import TrashOperator, TrashResult
from piper.jobs.messages import (
    CompressionFinished,
    ItemCompressed,
    ItemFailed,
    JobMessage,
    RestoreFinished,
    ScanCompleted,
    is_terminal,
)
from piper.jobs.models import Command, ItemStatus, JobState, ManagedItem
from piper.jobs.scoring import compute_score, total_savings

logger = logging.getLogger(__name__)

NO_SAVINGS_ERROR = "no savings or size increased"


class HistorySink(Protocol):
    """Receives the totals of every finished compression session."""

    def record_session(self, original_size_bytes: int, compressed_size_bytes: int) -> None: ...


class Trash(Protocol):
    """Reversible delete facility."""

    def trash(self, path: str) -> TrashResult: ...


@dataclass(slots=True)
class JobHandle:
    """Bookkeeping for one background job.

    Handles cannot stop their threads. Once the terminating message is
    applied the handle is forgotten and nothing else from that job is read.

    Attributes:
        kind: Job state the orchestrator is in while this job runs.
        channel: Queue the job's workers post messages onto.
        thread: The job's top-level thread.
        session_original_bytes: Compression only, original bytes of done items.
        session_compressed_bytes: Compression only, archive bytes of done items.
        session_done: Compression only, number of items that reached done.
    """

    kind: JobState
    channel: queue.SimpleQueue[JobMessage]
    thread: threading.Thread
    session_original_bytes: int = field(default=0)
    session_compressed_bytes: int = field(default=0)
    session_done: int = field(default=0)


class Orchestrator:
    """Coordinates scan, compression, restore and delete over a scan root.

    Args:
        root: Directory the scan job crawls.
        archiver: Compression engine used by compression and restore jobs.
        crawler: Crawler used by the scan job.
        history_sink: Receives per-session totals (optional).
        trash: Reversible delete facility (defaults to the XDG trash).
        workers: Maximum parallel compressions (None = executor default).
    """

    def __init__(
        self,
        root: Path | str,
        archiver: Archiver | None = None,
        crawler: Crawler | None = None,
        history_sink: HistorySink | None = None,
        trash: Trash | None = None,
        workers: int | None = None,
    ) -> None:
        self._root = Path(root)
        self._archiver = archiver if archiver is not None else Archiver()
        self._crawler = crawler if crawler is not None else Crawler()
        self._history_sink = history_sink
        self._trash = trash if trash is not None else TrashOperator()
        self._workers = workers

        self._state = JobState.IDLE
        self._items: list[ManagedItem] = []
        self._cursor = 0
        self._jobs: list[JobHandle] = []
        self._score = 0.0
        self._total_savings = 0

        self._handlers: dict[Command, Callable[[], None]] = {
            Command.SCAN: self.start_scan,
            Command.COMPRESS: self.start_compression,
            Command.DELETE: self.delete,
            Command.RESTORE: self.start_restore,
            Command.NEXT: self.next,
            Command.PREVIOUS: self.previous,
            Command.TOGGLE_SELECTION: self.toggle_selection,
            Command.TOGGLE_ALL: self.toggle_all,
        }

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def root(self) -> Path:
        """Directory the scan job crawls."""
        return self._root

    @property
    def state(self) -> JobState:
        """The job currently running."""
        return self._state

    @property
    def items(self) -> Sequence[ManagedItem]:
        """Managed items, in scan order (largest first)."""
        return tuple(self._items)

    @property
    def cursor(self) -> int:
        """Index of the highlighted item."""
        return self._cursor

    @property
    def current_item(self) -> ManagedItem | None:
        """The highlighted item, or None when the list is empty."""
        if not self._items:
            return None
        return self._items[self._cursor]

    @property
    def score(self) -> float:
        """Aggregate compression score."""
        return self._score

    @property
    def total_savings(self) -> int:
        """Bytes reclaimed across all items."""
        return self._total_savings

    @property
    def is_idle(self) -> bool:
        """Whether no background job is running."""
        return self._state is JobState.IDLE

    # =========================================================================
    # Commands
    # =========================================================================

    def handle_command(self, command: Command) -> None:
        """Dispatch a command to its handler."""
        self._handlers[command]()

    def start_scan(self) -> None:
        """Crawl the root on a background thread, replacing all items."""
        if not self._require_idle(Command.SCAN):
            return

        self._items = []
        self._cursor = 0
        self._recompute()
        self._state = JobState.SCANNING

        root = self._root
        crawler = self._crawler

        def run(channel: queue.SimpleQueue[JobMessage]) -> None:
            candidates: list[CandidateItem] = []
            try:
                candidates = crawler.crawl(root)
            except Exception:
                logger.exception("Crawl of %s failed", root)
            channel.put(ScanCompleted(tuple(candidates)))

        self._spawn(JobState.SCANNING, run, "piper-scan")
        logger.debug("Scan of %s started", root)

    def start_compression(self) -> None:
        """Compress the targeted items in parallel on background threads.

        Targets are the selected found items if anything is selected,
        otherwise every found item.
        """
        if not self._require_idle(Command.COMPRESS):
            return

        targets = self._compression_targets()
        if not targets:
            logger.debug("Nothing to compress")
            return

        for index in targets:
            self._items[index].status = ItemStatus.COMPRESSING
            self._items[index].error = None
        self._state = JobState.COMPRESSING

        work = [(index, self._items[index].path) for index in targets]
        archiver = self._archiver
        workers = self._workers

        def compress_one(channel: queue.SimpleQueue[JobMessage], index: int, path: str) -> None:
            try:
                result = archiver.compress(path)
            except ArchiveError as e:
                channel.put(ItemFailed(index, str(e)))
                return
            except Exception as e:
                logger.exception("Unexpected failure compressing %s", path)
                channel.put(ItemFailed(index, str(e)))
                return
            channel.put(ItemCompressed(index, result))

        def run(channel: queue.SimpleQueue[JobMessage]) -> None:
            try:
                with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="piper-compress") as pool:
                    for index, path in work:
                        pool.submit(compress_one, channel, index, path)
            finally:
                channel.put(CompressionFinished())

        self._spawn(JobState.COMPRESSING, run, "piper-compress-coordinator")
        self._recompute()
        logger.debug("Compression of %d item(s) started", len(work))

    def start_restore(self) -> None:
        """Restore the highlighted item if it is compressed."""
        if not self._require_idle(Command.RESTORE):
            return

        item = self.current_item
        if item is None or item.status is not ItemStatus.DONE:
            logger.debug("Restore ignored: highlighted item is not compressed")
            return

        index = self._cursor
        item.status = ItemStatus.COMPRESSING
        item.error = None
        self._state = JobState.RESTORING

        original = Path(item.path)
        archiver = self._archiver

        def run(channel: queue.SimpleQueue[JobMessage]) -> None:
            try:
                archiver.decompress(resolve_archive_path(original))
            except ArchiveError as e:
                channel.put(RestoreFinished(index, success=False, error=str(e)))
                return
            except Exception as e:
                logger.exception("Unexpected failure restoring %s", original)
                channel.put(RestoreFinished(index, success=False, error=str(e)))
                return
            channel.put(RestoreFinished(index, success=True))

        self._spawn(JobState.RESTORING, run, "piper-restore")
        logger.debug("Restore of %s started", original)

    def delete(self) -> None:
        """Move the targeted items to the trash, synchronously.

        Targets are the selected items if anything is selected, otherwise
        the highlighted item. Only found and done items are eligible; for
        a done item its archive is trashed.
        """
        if any(item.selected for item in self._items):
            targets = [item for item in self._items if item.selected]
        elif self.current_item is not None:
            targets = [self.current_item]
        else:
            targets = []

        for item in targets:
            if item.status not in (ItemStatus.FOUND, ItemStatus.DONE):
                logger.debug("Delete skipped for %s (status %s)", item.path, item.status.value)
                continue

            path = item.path
            if item.status is ItemStatus.DONE:
                path = str(resolve_archive_path(Path(item.path)))

            result = self._trash.trash(path)
            if result.success:
                item.status = ItemStatus.DELETED
                item.compressed_size_bytes = 0
                item.selected = False
                item.error = None
            else:
                item.status = ItemStatus.ERROR
                item.error = result.error
                logger.warning("Could not delete %s: %s", path, result.error)

        self._recompute()

    def next(self) -> None:
        """Move the cursor down, wrapping to the top."""
        if not self._items:
            return
        self._cursor = (self._cursor + 1) % len(self._items)

    def previous(self) -> None:
        """Move the cursor up, wrapping to the bottom."""
        if not self._items:
            return
        self._cursor = (self._cursor - 1) % len(self._items)

    def toggle_selection(self) -> None:
        """Toggle selection of the highlighted item."""
        item = self.current_item
        if item is not None:
            item.selected = not item.selected

    def toggle_all(self) -> None:
        """Select every item, or clear the selection if all are selected."""
        select = not all(item.selected for item in self._items)
        for item in self._items:
            item.selected = select

    # =========================================================================
    # Control loop
    # =========================================================================

    def tick(self) -> None:
        """Apply every queued job message without blocking."""
        for handle in list(self._jobs):
            while True:
                try:
                    message = handle.channel.get_nowait()
                except queue.Empty:
                    break
                self._apply(handle, message)
                if is_terminal(message):
                    self._jobs.remove(handle)
                    break
        self._recompute()

    def wait_until_idle(self, poll_interval: float = 0.05, timeout: float | None = None) -> bool:
        """Tick at a fixed interval until no job is running.

        Args:
            poll_interval: Seconds between ticks.
            timeout: Give up after this many seconds (None = wait forever).

        Returns:
            True if the orchestrator became idle, False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        self.tick()
        while not self.is_idle:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll_interval)
            self.tick()
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_idle(self, command: Command) -> bool:
        if self._state is JobState.IDLE:
            return True
        logger.debug("Ignoring %s while %s", command.value, self._state.value)
        return False

    def _compression_targets(self) -> list[int]:
        if any(item.selected for item in self._items):
            return [
                i for i, item in enumerate(self._items) if item.selected and item.status is ItemStatus.FOUND
            ]
        return [i for i, item in enumerate(self._items) if item.status is ItemStatus.FOUND]

    def _spawn(
        self,
        kind: JobState,
        target: Callable[[queue.SimpleQueue[JobMessage]], None],
        name: str,
    ) -> JobHandle:
        channel: queue.SimpleQueue[JobMessage] = queue.SimpleQueue()
        thread = threading.Thread(target=target, args=(channel,), name=name, daemon=True)
        handle = JobHandle(kind=kind, channel=channel, thread=thread)
        self._jobs.append(handle)
        thread.start()
        return handle

    def _item_at(self, index: int) -> ManagedItem | None:
        if 0 <= index < len(self._items):
            return self._items[index]
        logger.debug("Message for unknown item index %d", index)
        return None

    def _apply(self, handle: JobHandle, message: JobMessage) -> None:
        """Apply one job message to the item list and job state."""
        match message:
            case ScanCompleted(candidates=candidates):
                self._items = [ManagedItem.from_candidate(c) for c in candidates]
                self._cursor = 0
                self._state = JobState.IDLE
                logger.debug("Scan finished with %d candidate(s)", len(self._items))

            case ItemCompressed(index=index, result=result):
                item = self._item_at(index)
                if item is not None:
                    self._apply_compressed(handle, item, result)

            case ItemFailed(index=index, error=error):
                item = self._item_at(index)
                if item is not None:
                    item.status = ItemStatus.ERROR
                    item.error = error
                    logger.debug("Compression of %s failed: %s", item.path, error)

            case CompressionFinished():
                self._state = JobState.IDLE
                self._record_session(handle)

            case RestoreFinished(index=index, success=success, error=error):
                item = self._item_at(index)
                if item is not None:
                    if success:
                        item.status = ItemStatus.RESTORED
                        item.compressed_size_bytes = None
                        item.error = None
                    else:
                        item.status = ItemStatus.ERROR
                        item.error = error
                self._state = JobState.IDLE

    def _apply_compressed(self, handle: JobHandle, item: ManagedItem, result: CompressionResult) -> None:
        if not result.saved_space:
            item.status = ItemStatus.ERROR
            item.error = NO_SAVINGS_ERROR
            return

        item.status = ItemStatus.DONE
        item.compressed_size_bytes = result.compressed_size_bytes
        item.error = None
        handle.session_original_bytes += item.original_size_bytes
        handle.session_compressed_bytes += result.compressed_size_bytes
        handle.session_done += 1

    def _record_session(self, handle: JobHandle) -> None:
        if handle.session_done == 0 or self._history_sink is None:
            return
        try:
            self._history_sink.record_session(handle.session_original_bytes, handle.session_compressed_bytes)
        except (OSError, RuntimeError) as e:
            logger.warning("Failed to record compression session: %s", e)

    def _recompute(self) -> None:
        self._score = compute_score(self._items)
        self._total_savings = total_savings(self._items)
