"""Shared fixtures: fake OS capabilities and a throwaway system layout."""

import os
import time
from pathlib import Path

import pytest

from drivesweep.errors import CapabilityError
from drivesweep.system import SystemPaths

DAY = 86_400


class FakeVolumeLister:
    def __init__(self, volumes=None, total=100 * 1000**3, free=40 * 1000**3):
        self.volumes = list(volumes or [])
        self.total = total
        self.free = free

    def list_volumes(self):
        return list(self.volumes)

    def usage(self, mount_point):
        return self.total, self.free


class FakeRecycleBin:
    def __init__(self, size_bytes=0, item_count=0, fail_query=False, fail_empty=False):
        self.size_bytes = size_bytes
        self.item_count = item_count
        self.fail_query = fail_query
        self.fail_empty = fail_empty
        self.emptied = 0

    def query(self):
        if self.fail_query:
            raise CapabilityError("query failed")
        return self.size_bytes, self.item_count

    def empty(self):
        if self.fail_empty:
            raise CapabilityError("SHEmptyRecycleBinW failed: 0x80004005")
        self.emptied += 1


class FakePowerConfig:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def set_hibernation(self, enabled):
        self.calls.append(enabled)
        if self.fail:
            raise CapabilityError(
                "Failed to update hibernation state. Try running as administrator."
            )


def make_file(path: Path, size: int = 0, age_days: float = 0, now: float | None = None) -> Path:
    """Create a file of a given size whose mtime is age_days in the past."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        if size:
            f.seek(size - 1)
            f.write(b"\0")
    now = time.time() if now is None else now
    mtime = now - age_days * DAY
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def system_paths(tmp_path):
    """A fake system drive rooted in tmp_path."""
    windows = tmp_path / "Windows"
    profile = tmp_path / "Users" / "alice"
    local = profile / "AppData" / "Local"
    temp = tmp_path / "scratch"
    for directory in (windows, profile, local, temp):
        directory.mkdir(parents=True)

    return SystemPaths(
        system_drive=str(tmp_path),
        system_root=str(windows),
        user_profile=str(profile),
        local_app_data=str(local),
        temp_dir=str(temp),
        volumes=(),
        volume_root=str(tmp_path),
    )


@pytest.fixture
def recycle_bin():
    return FakeRecycleBin(size_bytes=4096, item_count=3)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the settings file at a temp location."""
    config_file = tmp_path / "config" / "config.json"
    monkeypatch.setenv("DRIVESWEEP_CONFIG", str(config_file))
    return config_file


DEEP_TREE_DEPTH = 1100


@pytest.fixture
def deep_tree(tmp_path):
    """A single chain of directories deeper than the interpreter's recursion limit.

    Yields (root, leaf_file). Built and torn down one level at a time, since
    recursive helpers like os.makedirs cannot handle this depth.
    """
    root = tmp_path / "deep"
    root.mkdir()
    chain = []
    current = root
    for _ in range(DEEP_TREE_DEPTH):
        current = current / "d"
        current.mkdir()
        chain.append(current)
    leaf = make_file(current / "leaf.log", size=64)

    yield root, leaf

    if leaf.exists():
        leaf.unlink()
    for directory in reversed(chain):
        if directory.exists():
            directory.rmdir()
