"""XDG-compliant path management for piper.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, and trash storage.

XDG defaults:
- Config: ~/.config/piper/
- State: ~/.local/state/piper/
- Trash: ~/.local/share/Trash/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "piper"

# Scan root used when neither the CLI nor the config file names one
DEFAULT_SCAN_SUBDIR = "Developer"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the XDG base directory (not application specific).
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/piper/ (or XDG_CONFIG_HOME/piper/).
    """
    return _get_xdg_base("XDG_CONFIG_HOME", ".config") / APP_NAME


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the session history that should persist
    between runs but is not configuration.

    Returns:
        Path to ~/.local/state/piper/ (or XDG_STATE_HOME/piper/).
    """
    return _get_xdg_base("XDG_STATE_HOME", ".local/state") / APP_NAME


def get_trash_dir() -> Path:
    """Get the user's freedesktop.org trash directory.

    The trash is shared with the desktop environment, so it lives
    directly under the data home and is not application specific.

    Returns:
        Path to ~/.local/share/Trash/ (or XDG_DATA_HOME/Trash/).
    """
    return _get_xdg_base("XDG_DATA_HOME", ".local/share") / "Trash"


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/piper/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/piper/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_default_scan_root() -> Path:
    """Get the scan root used when none is configured.

    Returns:
        Path to ~/Developer.
    """
    return Path.home() / DEFAULT_SCAN_SUBDIR


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        Path to the state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def ensure_trash_dirs(trash_dir: Path | None = None) -> tuple[Path, Path]:
    """Create the trash ``files`` and ``info`` directories.

    Args:
        trash_dir: Optional trash root override. Defaults to get_trash_dir().

    Returns:
        Tuple of (files_dir, info_dir).

    Raises:
        RuntimeError: If either directory cannot be created.
    """
    root = trash_dir if trash_dir is not None else get_trash_dir()
    files_dir = _ensure_dir(root / "files", "trash files")
    info_dir = _ensure_dir(root / "info", "trash info")
    return files_dir, info_dir
