"""Reversible deletion through the freedesktop.org trash.

Moves paths into ``$XDG_DATA_HOME/Trash/files`` and writes the matching
``.trashinfo`` record, so file managers can restore them. Protected
paths are rejected before anything is touched.
"""

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from piper.core.paths import ensure_trash_dirs
from piper.filesystem.protected import is_protected_path

logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 10_000


@dataclass(frozen=True, slots=True)
class TrashResult:
    """Result of moving a single path to the trash.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the operation completed successfully.
        error: Error message if the operation failed, None otherwise.
        trashed_path: Where the entry now lives inside the trash.
        dry_run: Whether this was a dry-run (nothing was moved).
    """

    path: str
    success: bool
    error: str | None = None
    trashed_path: str | None = None
    dry_run: bool = False


class TrashOperator:
    """Moves filesystem paths to the user's trash.

    Args:
        dry_run: If True, report what would be trashed without moving anything.
        trash_dir: Trash root override (defaults to the XDG trash).
    """

    def __init__(self, dry_run: bool = False, trash_dir: Path | None = None) -> None:
        self._dry_run = dry_run
        self._trash_dir = trash_dir

    def trash(self, path: str) -> TrashResult:
        """Move one path to the trash.

        Args:
            path: Absolute filesystem path to trash.

        Returns:
            TrashResult indicating success or failure.
        """
        if is_protected_path(path):
            return TrashResult(
                path=path,
                success=False,
                error=f"Protected path cannot be deleted: {path}",
            )

        target = Path(path)
        if not (target.exists() or target.is_symlink()):
            return TrashResult(
                path=path,
                success=False,
                error=f"Path does not exist: {path}",
            )

        if self._dry_run:
            logger.info("Dry-run: would trash %s", path)
            return TrashResult(path=path, success=True, dry_run=True)

        try:
            files_dir, info_dir = ensure_trash_dirs(self._trash_dir)
        except RuntimeError as e:
            return TrashResult(path=path, success=False, error=str(e))

        try:
            info_path = self._reserve_info(info_dir, target)
            destination = files_dir / info_path.name.removesuffix(".trashinfo")
            try:
                shutil.move(str(target), str(destination))
            except OSError:
                info_path.unlink(missing_ok=True)
                raise
        except OSError as e:
            return TrashResult(path=path, success=False, error=str(e))

        logger.info("Trashed %s -> %s", path, destination)
        return TrashResult(path=path, success=True, trashed_path=str(destination))

    @staticmethod
    def _reserve_info(info_dir: Path, target: Path) -> Path:
        """Create a unique ``.trashinfo`` file for a target.

        The info file is created exclusively, which claims the matching
        name in the ``files`` directory as well.

        Args:
            info_dir: The trash ``info`` directory.
            target: Path about to be trashed.

        Returns:
            Path of the created info file.

        Raises:
            OSError: If no unique name could be claimed or the file
                cannot be written.
        """
        absolute = target.absolute()
        content = (
            "[Trash Info]\n"
            f"Path={quote(str(absolute))}\n"
            f"DeletionDate={datetime.now().strftime('%Y-%m-%dT%H:%M:%S')}\n"
        )

        for attempt in range(1, _MAX_NAME_ATTEMPTS + 1):
            name = target.name if attempt == 1 else f"{target.name}.{attempt}"
            info_path = info_dir / f"{name}.trashinfo"
            try:
                with info_path.open("x", encoding="utf-8") as f:
                    f.write(content)
            except FileExistsError:
                continue
            return info_path

        msg = f"No free trash name for {target.name}"
        raise OSError(msg)
