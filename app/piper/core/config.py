"""Configuration model and file I/O.

The configuration lives in ~/.config/piper/config.toml and controls the
scan root, the compression level and the crawl heuristics. Every field
has a default, so a missing default config file is not an error.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from piper.core.paths import ensure_config_dir, get_config_path, get_default_scan_root

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 15

DEFAULT_HEAVY_MARKERS: tuple[str, ...] = ("node_modules", "target", "venv", ".venv")

DEFAULT_STALE_EXTENSIONS: tuple[str, ...] = ("log", "txt", "old")

MIB = 1024 * 1024


class PiperConfig(BaseModel):
    """Settings for scanning and compression.

    Attributes:
        scan_root: Directory crawled by ``scan``, ``compress`` and ``clean``.
        compression_level: zstd level (1-22), trading speed for ratio.
        heavy_markers: Directory names treated as one reclaimable unit.
        stale_extensions: File extensions (without dot) eligible as stale logs.
        stale_min_size_bytes: Stale files must be strictly larger than this.
        stale_age_days: Stale files must not have been accessed for longer than this.
        workers: Worker thread count for crawling and compression (None = auto).
    """

    model_config = ConfigDict(extra="forbid")

    scan_root: Annotated[
        Path,
        Field(default_factory=get_default_scan_root, description="Directory to scan"),
    ]
    compression_level: Annotated[
        int,
        Field(ge=1, le=22, description="zstd compression level (1-22)"),
    ] = DEFAULT_COMPRESSION_LEVEL
    heavy_markers: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_HEAVY_MARKERS),
            description="Dependency/build directory names",
        ),
    ]
    stale_extensions: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_STALE_EXTENSIONS),
            description="Extensions of stale log candidates",
        ),
    ]
    stale_min_size_bytes: Annotated[
        int,
        Field(ge=0, description="Minimum size of a stale log"),
    ] = MIB
    stale_age_days: Annotated[
        int,
        Field(ge=0, description="Days since last access for a stale log"),
    ] = 30
    workers: Annotated[
        int | None,
        Field(ge=1, le=256, description="Worker threads (None = auto)"),
    ] = None

    @field_validator("scan_root", mode="after")
    @classmethod
    def expand_scan_root(cls, v: Path) -> Path:
        """Expand ``~`` in the configured scan root."""
        return v.expanduser()

    @field_validator("stale_extensions", mode="after")
    @classmethod
    def strip_extension_dots(cls, v: list[str]) -> list[str]:
        """Accept extensions written as ``.log`` as well as ``log``."""
        return [ext.lstrip(".") for ext in v if ext.lstrip(".")]

    @field_validator("heavy_markers", mode="after")
    @classmethod
    def validate_markers(cls, v: list[str]) -> list[str]:
        """Reject marker names that could match a path instead of a name."""
        for marker in v:
            if not marker or "/" in marker:
                msg = f"Invalid heavy marker name: {marker!r}"
                raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> PiperConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit config file. If None, the default path is used and a
            missing file yields the default configuration.

    Returns:
        Validated PiperConfig object.

    Raises:
        ConfigNotFoundError: If an explicit config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config at %s, using defaults", config_path)
        return PiperConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    # Older configs used the key "scan" for the root
    if "scan" in data and "scan_root" not in data:
        data["scan_root"] = data.pop("scan")

    try:
        return PiperConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: PiperConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The PiperConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    try:
        if path is None:
            ensure_config_dir()
        else:
            config_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, RuntimeError) as e:
        raise ConfigError(f"Failed to create config directory: {e}") from e

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: PiperConfig) -> dict[str, object]:
    """Convert PiperConfig to a dictionary for TOML serialization.

    ``workers`` is omitted when unset since TOML has no null value.

    Args:
        config: The PiperConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "scan_root": str(config.scan_root),
        "compression_level": config.compression_level,
        "heavy_markers": list(config.heavy_markers),
        "stale_extensions": list(config.stale_extensions),
        "stale_min_size_bytes": config.stale_min_size_bytes,
        "stale_age_days": config.stale_age_days,
    }
    if config.workers is not None:
        result["workers"] = config.workers
    return result
