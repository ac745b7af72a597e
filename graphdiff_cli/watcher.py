"""Modification-time watcher for a single graph file.

Polling is driven by watchdog's ``PollingObserver`` so it behaves the same on
network mounts and in containers where inotify events are unreliable. The
observer only tells us that *something* near the file changed; ``check()``
decides whether the file's timestamp actually moved forward, which keeps the
callback to one call per new timestamp.
"""

from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0


class WatcherState(str, Enum):
    WATCHING = "watching"
    STOPPED = "stopped"


def _normpath(path: Union[str, bytes]) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class _TargetFileHandler(FileSystemEventHandler):
    """Forward events touching one file to its watcher."""

    def __init__(self, watcher: "FileWatcher") -> None:
        super().__init__()
        self.watcher = watcher
        self.target = _normpath(watcher.path)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(p and _normpath(p) == self.target for p in paths):
            self.watcher.check()


class FileWatcher:
    """Invoke *callback* once for every strictly newer modification time."""

    def __init__(
        self,
        path: Union[str, Path],
        callback: Callable[[Path], None],
        interval: float = DEFAULT_INTERVAL,
        name: Optional[str] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.path = Path(path).resolve()
        self.callback = callback
        self.interval = interval
        self.name = name or self.path.name
        self.state = WatcherState.STOPPED
        self.trigger_count = 0
        self._lock = threading.Lock()
        self._observer: Optional[PollingObserver] = None
        self._last_seen = self.last_modified()

    def last_modified(self) -> Optional[int]:
        """Current mtime in nanoseconds, or ``None`` if the file is missing."""
        try:
            return os.stat(self.path).st_mtime_ns
        except FileNotFoundError:
            return None

    @property
    def last_seen(self) -> Optional[int]:
        return self._last_seen

    def mark_seen(self, mtime_ns: Optional[int]) -> None:
        """Treat *mtime_ns* as already handled."""
        with self._lock:
            self._last_seen = mtime_ns

    def check(self) -> bool:
        """Run one poll step; return True if the callback fired."""
        with self._lock:
            current = self.last_modified()
            if current is None:
                return False
            if self._last_seen is not None and current <= self._last_seen:
                return False

            logger.debug("%s changed (mtime %s -> %s)", self.path, self._last_seen, current)
            try:
                self.callback(self.path)
            except Exception:
                logger.exception("Change handler for %s failed", self.path)
            finally:
                self._last_seen = current
                self.trigger_count += 1
            return True

    def start(self) -> None:
        if self.state is WatcherState.WATCHING:
            return
        observer = PollingObserver(timeout=self.interval)
        observer.name = f"watch-{self.name}"
        observer.schedule(_TargetFileHandler(self), str(self.path.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        self.state = WatcherState.WATCHING
        logger.info("Watching %s every %.2fs", self.path, self.interval)
        # Catch writes that landed between construction and the first snapshot.
        self.check()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the polling thread to finish and wait for it.

        A callback already running is allowed to complete.
        """
        observer = self._observer
        if observer is None:
            self.state = WatcherState.STOPPED
            return
        observer.stop()
        if observer.is_alive() and observer is not threading.current_thread():
            observer.join(timeout)
        self._observer = None
        self.state = WatcherState.STOPPED
        logger.info("Stopped watching %s after %d trigger(s)", self.path, self.trigger_count)

    @property
    def is_watching(self) -> bool:
        return self.state is WatcherState.WATCHING

    def __enter__(self) -> "FileWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
