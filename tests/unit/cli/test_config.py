"""Unit tests for the config command."""

import tomllib
from pathlib import Path

from piper.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigShow:
    """Tests for piper config show."""

    def test_show_defaults(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        data = tomllib.loads(result.stdout)
        assert data["compression_level"] == 15
        assert data["heavy_markers"] == ["node_modules", "target", "venv", ".venv"]

    def test_show_explicit_file(self, tmp_path: Path) -> None:
        path = tmp_path / "c.toml"
        path.write_text("compression_level = 7\n")

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        assert result.exit_code == 0
        assert tomllib.loads(result.stdout)["compression_level"] == 7

    def test_show_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "c.toml"
        path.write_text("unknown_key = 1\n")

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        assert result.exit_code == 1


class TestConfigInit:
    """Tests for piper config init."""

    def test_init_writes_default_file(self, isolated_xdg: Path) -> None:
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        path = isolated_xdg / "config" / "piper" / "config.toml"
        assert tomllib.loads(path.read_text())["stale_age_days"] == 30

    def test_init_refuses_overwrite(self, tmp_path: Path) -> None:
        path = tmp_path / "c.toml"
        path.write_text("compression_level = 7\n")

        result = runner.invoke(app, ["--config", str(path), "config", "init"])

        assert result.exit_code == 1
        assert path.read_text() == "compression_level = 7\n"

    def test_init_force(self, tmp_path: Path) -> None:
        path = tmp_path / "c.toml"
        path.write_text("compression_level = 7\n")

        result = runner.invoke(app, ["--config", str(path), "config", "init", "--force"])

        assert result.exit_code == 0
        assert tomllib.loads(path.read_text())["compression_level"] == 15
