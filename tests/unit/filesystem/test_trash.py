"""Unit tests for the XDG TrashOperator."""

from pathlib import Path
from unittest.mock import patch
from urllib.parse import unquote

import pytest
from piper.filesystem.trash import TrashOperator


@pytest.fixture
def trash_dir(tmp_path: Path) -> Path:
    return tmp_path / "Trash"


class TestTrash:
    """Tests for TrashOperator.trash."""

    def test_file_moved_with_trashinfo(self, tmp_path: Path, trash_dir: Path) -> None:
        """A trashed file lands in files/ with a matching info record."""
        victim = tmp_path / "work" / "old.log"
        victim.parent.mkdir()
        victim.write_text("bye")

        result = TrashOperator(trash_dir=trash_dir).trash(str(victim))

        assert result.success is True
        assert result.trashed_path == str(trash_dir / "files" / "old.log")
        assert not victim.exists()
        assert (trash_dir / "files" / "old.log").read_text() == "bye"
        info = (trash_dir / "info" / "old.log.trashinfo").read_text()
        assert info.startswith("[Trash Info]\n")
        assert f"Path={victim}" in unquote(info)
        assert "DeletionDate=" in info

    def test_directory_moved(self, tmp_path: Path, trash_dir: Path) -> None:
        """Whole directories can be trashed."""
        folder = tmp_path / "node_modules"
        (folder / "pkg").mkdir(parents=True)
        (folder / "pkg" / "index.js").write_text("x")

        result = TrashOperator(trash_dir=trash_dir).trash(str(folder))

        assert result.success is True
        assert (trash_dir / "files" / "node_modules" / "pkg" / "index.js").exists()

    def test_name_collisions_get_unique_names(self, tmp_path: Path, trash_dir: Path) -> None:
        """Trashing the same name twice keeps both entries."""
        operator = TrashOperator(trash_dir=trash_dir)
        for folder in ("a", "b"):
            path = tmp_path / folder / "app.log"
            path.parent.mkdir()
            path.write_text(folder)
            assert operator.trash(str(path)).success

        assert (trash_dir / "files" / "app.log").read_text() == "a"
        assert (trash_dir / "files" / "app.log.2").read_text() == "b"
        assert (trash_dir / "info" / "app.log.2.trashinfo").exists()

    def test_protected_path_rejected(self, trash_dir: Path) -> None:
        """Protected paths are never touched."""
        result = TrashOperator(trash_dir=trash_dir).trash(str(Path.home() / ".ssh"))

        assert result.success is False
        assert result.error is not None
        assert "Protected" in result.error
        assert not trash_dir.exists()

    def test_missing_path_fails(self, tmp_path: Path, trash_dir: Path) -> None:
        """Nonexistent paths fail without creating the trash."""
        result = TrashOperator(trash_dir=trash_dir).trash(str(tmp_path / "ghost"))

        assert result.success is False
        assert "does not exist" in (result.error or "")

    def test_dry_run_moves_nothing(self, tmp_path: Path, trash_dir: Path) -> None:
        """Dry-run reports success but leaves the path in place."""
        victim = tmp_path / "keep.log"
        victim.write_text("x")

        result = TrashOperator(dry_run=True, trash_dir=trash_dir).trash(str(victim))

        assert result.success is True
        assert result.dry_run is True
        assert victim.exists()
        assert not trash_dir.exists()

    def test_move_failure_removes_info(self, tmp_path: Path, trash_dir: Path) -> None:
        """A failed move leaves no orphaned .trashinfo behind."""
        victim = tmp_path / "stuck.log"
        victim.write_text("x")

        with patch("piper.filesystem.trash.shutil.move", side_effect=OSError("cross-device")):
            result = TrashOperator(trash_dir=trash_dir).trash(str(victim))

        assert result.success is False
        assert "cross-device" in (result.error or "")
        assert victim.exists()
        assert list((trash_dir / "info").iterdir()) == []

    def test_default_trash_under_xdg_data_home(self, tmp_path: Path, isolated_xdg: Path) -> None:
        """Without an override the XDG data home trash is used."""
        victim = tmp_path / "x.log"
        victim.write_text("x")

        result = TrashOperator().trash(str(victim))

        assert result.trashed_path == str(isolated_xdg / "data" / "Trash" / "files" / "x.log")
