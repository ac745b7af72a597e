"""Core data models shared by the parser, similarity engine and orchestrator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass
class Node:
    name: str
    value: float = math.nan
    fan_in: int = 0
    fan_out: int = 0

    @property
    def has_value(self) -> bool:
        return not math.isnan(self.value)


@dataclass(frozen=True)
class Edge:
    src: int
    dst: int


@dataclass
class Graph:
    """Directed graph with named nodes, built once by the parser.

    Nodes keep first-seen order. Edges reference node positions and are
    deduplicated, so the graph is a simple digraph.
    """

    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    source: str = ""

    def find_node_by_name(self, name: str) -> Optional[int]:
        for index, node in enumerate(self.nodes):
            if node.name == name:
                return index
        return None

    def get_node(self, name: str) -> Optional[Node]:
        index = self.find_node_by_name(name)
        if index is None:
            return None
        return self.nodes[index]

    def find_or_add_node(self, name: str) -> int:
        index = self.find_node_by_name(name)
        if index is not None:
            return index
        self.nodes.append(Node(name=name))
        return len(self.nodes) - 1

    def find_or_add_edge(self, src: int, dst: int) -> int:
        if not (0 <= src < len(self.nodes) and 0 <= dst < len(self.nodes)):
            raise IndexError(f"Edge ({src}, {dst}) references a missing node")
        edge = Edge(src, dst)
        for index, existing in enumerate(self.edges):
            if existing == edge:
                return index
        self.edges.append(edge)
        return len(self.edges) - 1

    def compute_degrees(self) -> None:
        """Derive fan-in/fan-out from the full edge set.

        Expects zeroed degrees; running it twice double counts.
        """
        for edge in self.edges:
            self.nodes[edge.src].fan_out += 1
            self.nodes[edge.dst].fan_in += 1

    def sinks(self) -> List[Node]:
        return [node for node in self.nodes if node.fan_out == 0]

    def node_names(self) -> List[str]:
        return [node.name for node in self.nodes]

    def degree_totals(self) -> Tuple[int, int]:
        return (
            sum(node.fan_in for node in self.nodes),
            sum(node.fan_out for node in self.nodes),
        )

    @property
    def is_empty(self) -> bool:
        return not self.nodes


@dataclass
class NodeMatch:
    name: str
    best_match: Optional[str]
    distance: float
    matched: bool = False


@dataclass
class ComparisonResult:
    score: float
    matched: int
    total: int
    matches: List[NodeMatch] = field(default_factory=list)
    left_source: str = ""
    right_source: str = ""
    trigger: Optional[int] = None
    computed_at: datetime = field(default_factory=datetime.now)

    @property
    def is_defined(self) -> bool:
        return math.isfinite(self.score)
