"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
import os
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

DAY = 24 * 60 * 60


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG base directory at a throwaway location."""
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(base / "data"))
    return base


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Factory writing a file of a given size and access age."""

    def _make(
        path: Path,
        size: int = 0,
        *,
        content: bytes | None = None,
        accessed_days_ago: float | None = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content if content is not None else b"a" * size)
        if accessed_days_ago is not None:
            atime = time.time() - accessed_days_ago * DAY
            os.utime(path, (atime, path.stat().st_mtime))
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_piper_logger() -> Iterator[None]:
    """Undo handler changes the CLI makes to the package logger."""
    yield
    package_logger = logging.getLogger("piper")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
