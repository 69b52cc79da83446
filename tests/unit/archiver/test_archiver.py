"""Unit tests for the Archiver.

Tests for compress/decompress of files and directories and the
commit-or-discard guarantees around them.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import zstandard
from piper.archiver import (
    ArchiveFormatError,
    ArchiveIOError,
    Archiver,
    CompressionResult,
)


def _leftovers(directory: Path) -> list[str]:
    """Names of temporary or staging artifacts in a directory."""
    return [p.name for p in directory.iterdir() if "piper-" in p.name]


class TestArchiverInit:
    """Tests for Archiver construction."""

    def test_default_level(self) -> None:
        """Default level is 15."""
        assert Archiver().level == 15

    @pytest.mark.parametrize("level", [0, 23, -1])
    def test_out_of_range_level_rejected(self, level: int) -> None:
        """Levels outside 1-22 raise ValueError."""
        with pytest.raises(ValueError, match="between 1 and 22"):
            Archiver(level)


class TestCompressFile:
    """Tests for compressing a single file."""

    def test_repetitive_file_saves_space(self, tmp_path: Path) -> None:
        """A 1 MiB file of one repeated byte shrinks and replaces the original."""
        source = tmp_path / "big.log"
        source.write_bytes(b"x" * (1024 * 1024))

        result = Archiver().compress(source)

        assert result.original_size_bytes == 1024 * 1024
        assert result.compressed_size_bytes < result.original_size_bytes
        assert result.saved_space is True
        assert result.output_path == str(tmp_path / "big.log.zst")
        assert not source.exists()
        assert (tmp_path / "big.log.zst").stat().st_size == result.compressed_size_bytes

    def test_tiny_file_reports_no_savings(self, tmp_path: Path) -> None:
        """A 6-byte file is left untouched and no artifact remains."""
        source = tmp_path / "tiny.txt"
        source.write_bytes(b"abcdef")

        result = Archiver().compress(source)

        assert result == CompressionResult(6, 6, str(source))
        assert source.read_bytes() == b"abcdef"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["tiny.txt"]

    def test_round_trip_restores_identical_bytes(self, tmp_path: Path) -> None:
        """decompress(compress(f)) restores byte-identical content."""
        content = b"2024-01-01 INFO request served\n" * 5000
        source = tmp_path / "app.log"
        source.write_bytes(content)
        archiver = Archiver()

        result = archiver.compress(source)
        restored_size = archiver.decompress(result.output_path)

        assert restored_size == len(content)
        assert source.read_bytes() == content
        assert not Path(result.output_path).exists()

    def test_existing_output_is_never_overwritten(self, tmp_path: Path) -> None:
        """An unrelated file at the output name blocks compression."""
        source = tmp_path / "data.log"
        source.write_bytes(b"y" * 100_000)
        blocker = tmp_path / "data.log.zst"
        blocker.write_bytes(b"precious")

        with pytest.raises(ArchiveIOError, match="already exists"):
            Archiver().compress(source)

        assert source.exists()
        assert blocker.read_bytes() == b"precious"

    def test_missing_path_raises_io_error(self, tmp_path: Path) -> None:
        """Compressing a nonexistent path raises ArchiveIOError."""
        with pytest.raises(ArchiveIOError, match="does not exist"):
            Archiver().compress(tmp_path / "ghost.log")

    def test_symlink_is_refused(self, tmp_path: Path) -> None:
        """Symlinks are never compressed."""
        target = tmp_path / "real.log"
        target.write_bytes(b"z" * 10_000)
        link = tmp_path / "link.log"
        link.symlink_to(target)

        with pytest.raises(ArchiveIOError, match="symlink"):
            Archiver().compress(link)

        assert target.exists()

    def test_write_failure_discards_temp_and_keeps_original(self, tmp_path: Path) -> None:
        """A codec failure mid-stream leaves only the original."""
        source = tmp_path / "data.log"
        source.write_bytes(b"q" * 100_000)

        with patch("piper.archiver.archiver.zstandard.ZstdCompressor") as mock_cctx:
            mock_cctx.return_value.copy_stream.side_effect = OSError("disk full")
            with pytest.raises(ArchiveIOError, match="disk full"):
                Archiver().compress(source)

        assert source.exists()
        assert _leftovers(tmp_path) == []
        assert not (tmp_path / "data.log.zst").exists()

    def test_unlink_failure_rolls_back_output(self, tmp_path: Path) -> None:
        """If the original cannot be removed, the committed output is removed."""
        source = tmp_path / "data.log"
        source.write_bytes(b"r" * 100_000)

        real_unlink = Path.unlink

        def flaky_unlink(self: Path, missing_ok: bool = False) -> None:
            if self == source:
                raise PermissionError("denied")
            real_unlink(self, missing_ok=missing_ok)

        with (
            patch.object(Path, "unlink", autospec=True, side_effect=flaky_unlink),
            pytest.raises(ArchiveIOError, match="Could not remove"),
        ):
            Archiver().compress(source)

        assert source.exists()
        assert not (tmp_path / "data.log.zst").exists()

    @pytest.mark.parametrize("size", [1, 6, 4096, 300_000])
    def test_exactly_one_of_original_or_output_exists(self, tmp_path: Path, size: int) -> None:
        """After compress, exactly one of original and output exists."""
        source = tmp_path / "f.log"
        source.write_bytes(os.urandom(size // 2) + b"\0" * (size - size // 2))

        Archiver().compress(source)

        assert source.exists() != (tmp_path / "f.log.zst").exists()


class TestCompressDirectory:
    """Tests for packing and compressing directories."""

    @pytest.fixture
    def deps(self, tmp_path: Path) -> Path:
        """A node_modules-like tree with nested files."""
        root = tmp_path / "node_modules"
        (root / "left-pad" / "lib").mkdir(parents=True)
        (root / "left-pad" / "index.js").write_text("module.exports = 1;\n" * 2000)
        (root / "left-pad" / "lib" / "util.js").write_text("// util\n" * 3000)
        (root / "README.md").write_text("readme\n" * 500)
        return root

    def test_directory_packs_and_removes_original(self, deps: Path) -> None:
        """A compressible directory becomes <name>.tar.zst."""
        expected_size = sum(p.stat().st_size for p in deps.rglob("*") if p.is_file())

        result = Archiver().compress(deps)

        assert result.original_size_bytes == expected_size
        assert result.output_path == str(deps.parent / "node_modules.tar.zst")
        assert result.saved_space is True
        assert not deps.exists()
        assert _leftovers(deps.parent) == []

    def test_directory_round_trip(self, deps: Path) -> None:
        """Restoring a packed directory recreates the same tree."""
        before = {p.relative_to(deps): p.read_bytes() for p in deps.rglob("*") if p.is_file()}
        archiver = Archiver()

        result = archiver.compress(deps)
        restored_size = archiver.decompress(result.output_path)

        after = {p.relative_to(deps): p.read_bytes() for p in deps.rglob("*") if p.is_file()}
        assert after == before
        assert restored_size == result.original_size_bytes
        assert not Path(result.output_path).exists()
        assert _leftovers(deps.parent) == []

    def test_symlinks_survive_round_trip(self, tmp_path: Path) -> None:
        """Absolute and outward-pointing relative symlinks are restored as-is."""
        venv = tmp_path / "venv"
        (venv / "bin").mkdir(parents=True)
        (venv / "lib").mkdir()
        (venv / "lib" / "site.py").write_text("import os\n" * 20_000)
        (venv / "bin" / "python").symlink_to("/usr/bin/python3")
        (venv / "lib" / "shared").symlink_to("../../shared/lib")
        archiver = Archiver()

        result = archiver.compress(venv)
        assert result.saved_space is True
        assert not venv.exists()

        archiver.decompress(result.output_path)

        assert os.readlink(venv / "bin" / "python") == "/usr/bin/python3"
        assert os.readlink(venv / "lib" / "shared") == "../../shared/lib"
        assert (venv / "lib" / "site.py").read_text() == "import os\n" * 20_000
        assert not Path(result.output_path).exists()
        assert _leftovers(tmp_path) == []

    def test_incompressible_directory_untouched(self, tmp_path: Path) -> None:
        """A directory of random bytes is left in place."""
        root = tmp_path / "target"
        root.mkdir()
        (root / "blob.bin").write_bytes(os.urandom(2048))

        result = Archiver().compress(root)

        assert result.compressed_size_bytes == result.original_size_bytes
        assert result.output_path == str(root)
        assert (root / "blob.bin").exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["target"]


class TestDecompress:
    """Tests for Archiver.decompress error handling."""

    def test_unknown_suffix_is_format_error(self, tmp_path: Path) -> None:
        """Files without an archive suffix are rejected."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(ArchiveFormatError, match="suffix"):
            Archiver().decompress(path)

        assert path.exists()

    def test_corrupt_stream_keeps_archive(self, tmp_path: Path) -> None:
        """A garbage .zst raises ArchiveFormatError and is left untouched."""
        archive = tmp_path / "broken.log.zst"
        archive.write_bytes(b"this is not zstd at all")

        with pytest.raises(ArchiveFormatError):
            Archiver().decompress(archive)

        assert archive.exists()
        assert not (tmp_path / "broken.log").exists()
        assert _leftovers(tmp_path) == []

    def test_corrupt_packed_archive_leaves_no_staging(self, tmp_path: Path) -> None:
        """A .tar.zst holding no tar stream fails cleanly."""
        archive = tmp_path / "venv.tar.zst"
        archive.write_bytes(zstandard.ZstdCompressor().compress(b"definitely not a tar" * 100))

        with pytest.raises(ArchiveFormatError):
            Archiver().decompress(archive)

        assert archive.exists()
        assert not (tmp_path / "venv").exists()
        assert _leftovers(tmp_path) == []

    def test_existing_target_is_io_error(self, tmp_path: Path) -> None:
        """Restore never overwrites an existing file."""
        source = tmp_path / "app.log"
        source.write_bytes(b"s" * 50_000)
        archiver = Archiver()
        result = archiver.compress(source)
        source.write_text("new content")

        with pytest.raises(ArchiveIOError, match="already exists"):
            archiver.decompress(result.output_path)

        assert source.read_text() == "new content"
        assert Path(result.output_path).exists()

    def test_missing_archive_is_io_error(self, tmp_path: Path) -> None:
        """A nonexistent archive raises ArchiveIOError."""
        with pytest.raises(ArchiveIOError):
            Archiver().decompress(tmp_path / "gone.log.zst")
