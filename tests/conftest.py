"""Pytest configuration and fixtures for wpactrl tests."""

import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from test_helpers import FakeDaemon
from wpactrl.config import reset_config_cache


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path) -> Generator[None]:
    """Point config loading at an empty per-test directory and clear overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in (
        "WPACTRL_INTERFACE",
        "WPACTRL_CTRL_DIR",
        "WPACTRL_CTRL_PATH",
        "WPACTRL_CLIENT_DIR",
        "WPACTRL_TIMEOUT",
        "WPACTRL_NONBLOCKING",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def sock_dir() -> Generator[Path]:
    """Short-lived directory for socket files.

    Unix socket paths are limited to ~108 bytes, too short for pytest's
    tmp_path, so this lives directly under the system temp dir.
    """
    path = Path(tempfile.mkdtemp(prefix="wpactrl-"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def daemon(sock_dir) -> Generator[FakeDaemon]:
    """Running simulated daemon with PING/ATTACH/DETACH scripted."""
    fake = FakeDaemon(sock_dir).start()
    yield fake
    fake.stop()


@pytest.fixture
def client_dir(sock_dir) -> Path:
    path = sock_dir / "clients"
    path.mkdir()
    return path
