"""Tests for the modification-time file watcher."""

import os
import time
from pathlib import Path

import pytest

from graphdiff_cli.watcher import FileWatcher, WatcherState


def _touch(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


def _save(path: Path, text: str, mtime_ns: int) -> None:
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text)
    _touch(tmp, mtime_ns)
    os.replace(tmp, path)


@pytest.fixture
def watched_file(temp_dir: Path) -> Path:
    path = temp_dir / "graph.dot"
    path.write_text("va -> vb\n")
    _touch(path, 1_000_000_000_000_000_000)
    return path


def test_no_trigger_without_change(watched_file: Path):
    calls = []
    watcher = FileWatcher(watched_file, calls.append)
    assert watcher.check() is False
    assert calls == []
    assert watcher.state is WatcherState.STOPPED


def test_single_save_triggers_once(watched_file: Path):
    calls = []
    watcher = FileWatcher(watched_file, calls.append)

    # Truncate to zero edges and save once
    watched_file.write_text("")
    _touch(watched_file, 1_000_000_001_000_000_000)

    assert watcher.check() is True
    assert watcher.check() is False
    assert calls == [watched_file.resolve()]
    assert watcher.trigger_count == 1


def test_each_newer_timestamp_triggers(watched_file: Path):
    calls = []
    watcher = FileWatcher(watched_file, calls.append)
    for step in range(1, 4):
        _touch(watched_file, 1_000_000_000_000_000_000 + step * 1_000_000_000)
        watcher.check()
    assert len(calls) == 3


def test_older_timestamp_does_not_trigger(watched_file: Path):
    calls = []
    watcher = FileWatcher(watched_file, calls.append)
    _touch(watched_file, 999_000_000_000_000_000)
    assert watcher.check() is False
    assert calls == []


def test_missing_file_keeps_polling(temp_dir: Path):
    path = temp_dir / "later.dot"
    calls = []
    watcher = FileWatcher(path, calls.append)
    assert watcher.last_seen is None
    assert watcher.check() is False

    path.write_text("va -> vb\n")
    assert watcher.check() is True
    assert len(calls) == 1


def test_file_removed_after_baseline(watched_file: Path):
    calls = []
    watcher = FileWatcher(watched_file, calls.append)
    watched_file.unlink()
    assert watcher.check() is False
    assert watcher.last_seen == 1_000_000_000_000_000_000


def test_callback_error_does_not_refire(watched_file: Path):
    def boom(path):
        raise RuntimeError("handler failed")

    watcher = FileWatcher(watched_file, boom)
    _touch(watched_file, 1_000_000_002_000_000_000)
    assert watcher.check() is True
    assert watcher.check() is False
    assert watcher.trigger_count == 1


def test_invalid_interval(watched_file: Path):
    with pytest.raises(ValueError):
        FileWatcher(watched_file, lambda p: None, interval=0)


def test_background_polling_detects_change(temp_dir: Path):
    path = temp_dir / "live.dot"
    path.write_text("va -> vb\n")
    _touch(path, 1_000_000_000_000_000_000)
    calls = []

    with FileWatcher(path, calls.append, interval=0.05) as watcher:
        assert watcher.state is WatcherState.WATCHING
        _save(path, "va -> vb\nvb -> vc\n", 1_000_000_005_000_000_000)

        deadline = time.monotonic() + 5.0
        while not calls and time.monotonic() < deadline:
            time.sleep(0.02)
        # Give the poller a few more ticks to prove it does not fire twice
        time.sleep(0.3)

    assert watcher.state is WatcherState.STOPPED
    assert len(calls) == 1


def test_stop_without_start(watched_file: Path):
    watcher = FileWatcher(watched_file, lambda p: None)
    watcher.stop()
    assert watcher.state is WatcherState.STOPPED
