"""Coordinates the two watched graph files and the similarity engine."""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from .models import ComparisonResult, Graph
from .parser import DotGraphParser, GraphParseError
from .similarity import SimilarityEngine
from .watcher import DEFAULT_INTERVAL, FileWatcher

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ComparisonResult], None]
ErrorCallback = Callable[[int, Exception], None]


class GraphSlot:
    """Latest successfully parsed graph for one input file.

    The graph handle is replaced whole on publish, so readers always see a
    complete graph.
    """

    def __init__(self, index: int, path: Union[str, Path]) -> None:
        self.index = index
        self.path = Path(path)
        self.last_error: Optional[str] = None
        self._graph = Graph(source=str(self.path))
        self._loaded = False
        self._lock = threading.Lock()

    def publish(self, graph: Graph) -> None:
        with self._lock:
            self._graph = graph
            self._loaded = True
            self.last_error = None

    def snapshot(self) -> Graph:
        with self._lock:
            return self._graph

    @property
    def loaded(self) -> bool:
        return self._loaded


class ComparisonOrchestrator:
    """Reparse a file when it changes and rerun the comparison.

    Each input gets its own :class:`FileWatcher`. A change to one file is
    compared against the last good graph of the other.
    """

    def __init__(
        self,
        left: Union[str, Path],
        right: Union[str, Path],
        parser: Optional[DotGraphParser] = None,
        engine: Optional[SimilarityEngine] = None,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.parser = parser or DotGraphParser()
        self.engine = engine or SimilarityEngine()
        self.on_result = on_result
        self.on_error = on_error
        self.interval = interval
        self.slots: List[GraphSlot] = [GraphSlot(0, left), GraphSlot(1, right)]
        self.last_result: Optional[ComparisonResult] = None
        self.recompute_count = 0
        self._compare_lock = threading.Lock()
        self._watchers: List[FileWatcher] = []

    def reload(self, index: int) -> bool:
        """Parse slot *index*'s file and publish it if parsing succeeded."""
        slot = self.slots[index]
        try:
            graph = self.parser.parse_file(slot.path)
        except (OSError, GraphParseError) as exc:
            slot.last_error = str(exc)
            logger.warning("Keeping previous graph for %s: %s", slot.path, exc)
            if self.on_error is not None:
                self.on_error(index, exc)
            return False

        slot.publish(graph)
        logger.info(
            "Loaded %s: %d nodes, %d edges", slot.path, len(graph.nodes), len(graph.edges)
        )
        return True

    def recompute(self, trigger: Optional[int] = None) -> ComparisonResult:
        with self._compare_lock:
            left = self.slots[0].snapshot()
            right = self.slots[1].snapshot()
            result = self.engine.compare(left, right)
            result.trigger = trigger
            self.last_result = result
            self.recompute_count += 1
            if self.on_result is not None:
                self.on_result(result)
        return result

    def handle_change(self, index: int, path: Optional[Path] = None) -> ComparisonResult:
        self.reload(index)
        return self.recompute(trigger=index)

    def load_initial(self) -> ComparisonResult:
        for slot in self.slots:
            self.reload(slot.index)
        return self.recompute()

    def start(self) -> None:
        """Load both files, report the first score, then start watching."""
        if self._watchers:
            return
        self._watchers = [
            FileWatcher(
                slot.path,
                functools.partial(self.handle_change, slot.index),
                interval=self.interval,
                name=f"slot{slot.index}",
            )
            for slot in self.slots
        ]
        # Each baseline is the mtime read just before that slot's first parse,
        # so a save already covered by the parse does not fire again.
        for slot, watcher in zip(self.slots, self._watchers):
            seen = watcher.last_modified()
            self.reload(slot.index)
            watcher.mark_seen(seen)
        self.recompute()
        for watcher in self._watchers:
            watcher.start()

    def stop(self) -> None:
        for watcher in self._watchers:
            watcher.stop()
        self._watchers = []

    @property
    def watchers(self) -> List[FileWatcher]:
        return list(self._watchers)

    def __enter__(self) -> "ComparisonOrchestrator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
