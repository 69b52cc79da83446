"""Color theme for piper's console output.

The built-in palette can be partially overridden by
``~/.config/piper/theme.toml``::

    [colors]
    score = "#ffaa00"

    [status]
    done = "#00ff88"

Keys under ``[status]`` are item status values, so every status rendered
by the CLI has exactly one color. An unreadable or invalid theme file is
logged and ignored.
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from rich.theme import Theme

from piper.core.paths import get_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


def _check_hex(value: str) -> str:
    color = value.strip()
    if not color.startswith("#"):
        msg = f"color must start with '#', got {value!r}"
        raise ValueError(msg)
    if not _HEX_COLOR.fullmatch(color):
        msg = f"invalid hex color {value!r} (expected #RGB or #RRGGBB)"
        raise ValueError(msg)
    return color


HexColor = Annotated[str, AfterValidator(_check_hex)]


class StatusColors(BaseModel):
    """One color per item status, keyed by the status value."""

    model_config = ConfigDict(extra="forbid")

    found: HexColor = "#0ec1c8"
    compressing: HexColor = "#faf870"
    done: HexColor = "#03b971"
    error: HexColor = "#f53263"
    restored: HexColor = "#0e8ac8"
    deleted: HexColor = "#b2bec3"


class ThemeColors(BaseModel):
    """The complete piper palette."""

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"
    score: HexColor = "#c1ff62"
    status: Annotated[StatusColors, Field(default_factory=StatusColors)]


def _read_overrides(path: Path) -> dict[str, Any] | None:
    """Read the ``colors`` and ``status`` tables of a theme file.

    Args:
        path: Path to the TOML file.

    Returns:
        Keyword arguments for ThemeColors, or None if the file is missing
        or cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    overrides: dict[str, Any] = {}
    for table in ("colors", "status"):
        section = data.get(table, {})
        if not isinstance(section, dict):
            logger.warning("Ignoring invalid [%s] table in %s", table, path)
            continue
        if table == "colors":
            overrides.update(section)
        elif section:
            overrides["status"] = section
    return overrides


def load_theme(path: Path | None = None) -> ThemeColors:
    """Build the palette, applying user overrides when valid.

    Args:
        path: Theme file to read. Defaults to ~/.config/piper/theme.toml.

    Returns:
        ThemeColors with overrides applied, or the defaults if the file
        is missing or invalid.
    """
    overrides = _read_overrides(path or get_theme_path())
    if not overrides:
        return ThemeColors()

    try:
        return ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Invalid theme, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Convert a palette into the named Rich styles used by the CLI.

    Item statuses become ``status.<value>`` styles.
    """
    if colors is None:
        colors = load_theme()

    styles = {
        "text": colors.text,
        "muted": colors.muted,
        "dim": colors.muted,
        "border": colors.border,
        "bold_header": f"bold {colors.header}",
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "score": f"bold {colors.score}",
    }
    for status, color in colors.status.model_dump().items():
        styles[f"status.{status}"] = f"bold {color}" if status in ("done", "error") else color

    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading and caching it if necessary."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
