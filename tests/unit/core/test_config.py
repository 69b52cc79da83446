"""Unit tests for configuration loading and saving."""

import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest
from piper.core.config import (
    DEFAULT_COMPRESSION_LEVEL,
    MIB,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    PiperConfig,
    config_to_dict,
    load_config,
    save_config,
)
from pydantic import ValidationError


class TestPiperConfig:
    """Tests for the PiperConfig model."""

    def test_defaults(self) -> None:
        """Defaults match the documented heuristics."""
        config = PiperConfig()

        assert config.scan_root == Path.home() / "Developer"
        assert config.compression_level == DEFAULT_COMPRESSION_LEVEL == 15
        assert config.heavy_markers == ["node_modules", "target", "venv", ".venv"]
        assert config.stale_extensions == ["log", "txt", "old"]
        assert config.stale_min_size_bytes == MIB
        assert config.stale_age_days == 30
        assert config.workers is None

    def test_scan_root_expands_home(self) -> None:
        assert PiperConfig(scan_root=Path("~/src")).scan_root == Path.home() / "src"

    def test_extension_dots_stripped(self) -> None:
        assert PiperConfig(stale_extensions=[".log", "txt", "."]).stale_extensions == ["log", "txt"]

    @pytest.mark.parametrize("level", [0, 23])
    def test_level_out_of_range(self, level: int) -> None:
        with pytest.raises(ValidationError):
            PiperConfig(compression_level=level)

    @pytest.mark.parametrize("marker", ["", "a/b"])
    def test_invalid_marker(self, marker: str) -> None:
        with pytest.raises(ValidationError, match="Invalid heavy marker"):
            PiperConfig(heavy_markers=[marker])

    def test_unknown_key_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            PiperConfig(colour="blue")  # type: ignore[call-arg]


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_default_file_yields_defaults(self) -> None:
        assert load_config() == PiperConfig()

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_loads_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(f'scan_root = "{tmp_path}"\ncompression_level = 3\nworkers = 2\n')

        config = load_config(path)

        assert config.scan_root == tmp_path
        assert config.compression_level == 3
        assert config.workers == 2

    def test_legacy_scan_key(self, tmp_path: Path) -> None:
        """The older ``scan`` key is accepted as the scan root."""
        path = tmp_path / "config.toml"
        path.write_text(f'scan = "{tmp_path}"\n')

        assert load_config(path).scan_root == tmp_path

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("compression_level = \n")

        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("compression_level = 99\n")

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config and config_to_dict."""

    def test_round_trip(self, tmp_path: Path) -> None:
        config = PiperConfig(scan_root=tmp_path, compression_level=9, workers=3)
        path = save_config(config, tmp_path / "sub" / "config.toml")

        assert load_config(path) == config

    def test_default_location(self, isolated_xdg: Path) -> None:
        path = save_config(PiperConfig())
        assert path == isolated_xdg / "config" / "piper" / "config.toml"
        assert tomllib.loads(path.read_text())["compression_level"] == 15

    def test_workers_omitted_when_unset(self) -> None:
        assert "workers" not in config_to_dict(PiperConfig())

    def test_write_failure_leaves_no_temp(self, tmp_path: Path) -> None:
        target = tmp_path / "config.toml"
        with (
            patch("piper.core.config.os.replace", side_effect=OSError("read-only")),
            pytest.raises(ConfigError, match="Failed to write config"),
        ):
            save_config(PiperConfig(), target)

        assert list(tmp_path.iterdir()) == []
