"""Shared pytest fixtures for folder-sync tests."""

import os
from pathlib import Path

import pytest

from folder_sync.sync.models import OperationRecord

_ISOLATED_ENV_VARS = (
    "FOLDER_SYNC_SOURCE",
    "FOLDER_SYNC_REPLICA",
    "FOLDER_SYNC_LOG_FILE",
    "FOLDER_SYNC_INTERVAL",
    "FOLDER_SYNC_RETRY_DELAY",
    "FOLDER_SYNC_HASH",
    "FOLDER_SYNC_DEBUG",
    "FOLDER_SYNC_CONFIG",
    "LOG_LEVEL",
)


class RecordingLog:
    """In-memory operation recorder used in place of ``SyncLog``."""

    def __init__(self):
        self.messages = []
        self.operations = []

    def record(self, message):
        self.messages.append(message)

    def record_operation(self, kind, path, reason=None):
        self.operations.append(
            OperationRecord(kind=kind, path=path, reason=reason)
        )

    def labels(self):
        return [op.label for op in self.operations]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real env vars and config files out of every test.

    Unsets the FOLDER_SYNC_* variables and points CWD and HOME at an
    empty scratch directory so config discovery finds nothing.
    """
    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "_home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)
    return home


@pytest.fixture
def recorder():
    """Create an empty in-memory recorder."""
    return RecordingLog()


@pytest.fixture
def roots(tmp_path):
    """Create an empty source root and return ``(source, replica)``.

    The replica root is not created.
    """
    source = tmp_path / "source"
    source.mkdir()
    return source, tmp_path / "replica"


def make_tree(root: Path, layout: dict) -> None:
    """Create files and directories under *root* from a nested dict.

    String values become file contents; dict values become
    subdirectories.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        else:
            path.write_text(value, encoding="utf-8")


def read_tree(root: Path) -> dict:
    """Inverse of ``make_tree``: snapshot *root* as a nested dict."""
    layout = {}
    for name in sorted(os.listdir(root)):
        path = root / name
        if path.is_dir():
            layout[name] = read_tree(path)
        else:
            layout[name] = path.read_text(encoding="utf-8")
    return layout


@pytest.fixture(name="make_tree")
def make_tree_fixture():
    """Factory fixture for building directory trees from nested dicts."""
    return make_tree


@pytest.fixture(name="read_tree")
def read_tree_fixture():
    """Factory fixture for snapshotting directory trees."""
    return read_tree
