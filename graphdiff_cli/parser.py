"""Parser for the DOT layout written by rank-annotating graph exporters.

Only two line shapes carry information:

- edge lines such as ``va -> vb;``
- rank groups such as ``{ rank = same; 2.5; va; vb; }`` which assign the
  value in the second field to every node named after it

Everything else in the file (graph headers, attributes, comments) is ignored,
so newer exporter output keeps parsing.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import List, Optional, Union

from .models import Graph

logger = logging.getLogger(__name__)

DEFAULT_SIGIL = "v"
DEFAULT_RANK_MARKER = "rank = same"
DEFAULT_DELIMITER = ";"

_EDGE_RE = re.compile(r"^\s*(\S+?)\s*->\s*(\S+)")
# Attribute lists or statement terminators glued to the target token.
_TOKEN_TAIL_RE = re.compile(r"[;\[{}]")


class GraphParseError(ValueError):
    """Raised when a rank group carries a value that is not a number."""

    def __init__(self, source: str, line_number: int, message: str) -> None:
        self.source = source
        self.line_number = line_number
        super().__init__(f"{source}:{line_number}: {message}")


class DotGraphParser:
    """Turn exporter DOT text into a :class:`Graph` with derived degrees."""

    def __init__(
        self,
        sigil: str = DEFAULT_SIGIL,
        rank_marker: str = DEFAULT_RANK_MARKER,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        if not sigil:
            raise ValueError("sigil must be a non-empty string")
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")
        self.sigil = sigil
        self.rank_marker = rank_marker
        self.delimiter = delimiter

    def parse_file(self, file_path: Union[str, Path]) -> Graph:
        """Parse *file_path*. ``OSError`` propagates if it cannot be read."""
        path = Path(file_path)
        text = path.read_text(encoding="utf-8", errors="replace")
        return self.parse_text(text, source=str(path))

    def parse_text(self, text: str, source: str = "<string>") -> Graph:
        graph = Graph(source=source)
        edge_lines = value_lines = ignored = 0

        for line_number, line in enumerate(text.splitlines(), start=1):
            handled = False
            if self._parse_edge(graph, line):
                edge_lines += 1
                handled = True
            if self.rank_marker and self.rank_marker in line:
                self._parse_values(graph, line, source, line_number)
                value_lines += 1
                handled = True
            if not handled:
                ignored += 1

        graph.compute_degrees()
        logger.debug(
            "Parsed %s: %d nodes, %d edges (%d edge lines, %d rank lines, %d ignored)",
            source, len(graph.nodes), len(graph.edges), edge_lines, value_lines, ignored,
        )
        return graph

    def _is_node_ref(self, token: str) -> bool:
        return token.startswith(self.sigil)

    def _clean_target(self, token: str) -> Optional[str]:
        cleaned = _TOKEN_TAIL_RE.split(token, maxsplit=1)[0]
        return cleaned or None

    def _parse_edge(self, graph: Graph, line: str) -> bool:
        match = _EDGE_RE.match(line)
        if not match:
            return False
        src_name = match.group(1)
        dst_name = self._clean_target(match.group(2))
        if dst_name is None:
            return False
        if not (self._is_node_ref(src_name) and self._is_node_ref(dst_name)):
            return False
        src = graph.find_or_add_node(src_name)
        dst = graph.find_or_add_node(dst_name)
        graph.find_or_add_edge(src, dst)
        return True

    def _parse_values(self, graph: Graph, line: str, source: str, line_number: int) -> None:
        fields: List[str] = [f.strip() for f in line.split(self.delimiter)]
        if len(fields) < 2:
            raise GraphParseError(source, line_number, "rank group has no value field")
        try:
            value = float(fields[1])
        except ValueError:
            raise GraphParseError(
                source, line_number, f"rank value {fields[1]!r} is not a number"
            ) from None
        if not math.isfinite(value):
            raise GraphParseError(source, line_number, f"rank value {fields[1]!r} is not finite")

        for name in fields[2:]:
            if name and self._is_node_ref(name):
                index = graph.find_or_add_node(name)
                graph.nodes[index].value = value


def parse_graph(file_path: Union[str, Path]) -> Graph:
    """Parse *file_path* with the default exporter conventions."""
    return DotGraphParser().parse_file(file_path)
