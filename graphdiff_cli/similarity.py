"""Nearest-neighbour dissimilarity between two rank-annotated graphs."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from .models import ComparisonResult, Graph, Node, NodeMatch

logger = logging.getLogger(__name__)

# Score for comparisons that cannot be made (an empty graph on either side).
UNDEFINED = math.inf

DEFAULT_EPS = 1e-2
DEFAULT_WEIGHTS: Tuple[float, float, float] = (1 / 3, 1 / 3, 1 / 3)


def value_range(g1: Graph, g2: Graph) -> Optional[Tuple[float, float]]:
    """Min and max value over every valued node of both graphs."""
    values = [n.value for n in g1.nodes + g2.nodes if n.has_value]
    if not values:
        return None
    return min(values), max(values)


def normalize(value: float, lo: float, hi: float) -> float:
    """Rescale *value* into ``[0, 1]``.

    Unset values and a zero-width range both map to 0.0.
    """
    if math.isnan(value) or hi <= lo:
        return 0.0
    return (value - lo) / (hi - lo)


class SimilarityEngine:
    """Match every node of the left graph to its closest node on the right.

    The feature distance between two nodes is a weighted sum of the absolute
    differences of normalized value, fan-in and fan-out. A left node counts
    as matched when its closest right node is nearer than ``eps``; the score
    is the fraction of left nodes left unmatched. The score is asymmetric.
    """

    def __init__(self, eps: float = DEFAULT_EPS, weights: Sequence[float] = DEFAULT_WEIGHTS) -> None:
        weights = tuple(float(w) for w in weights)
        if len(weights) != 3 or any(w < 0 for w in weights):
            raise ValueError("weights must be three non-negative numbers")
        if eps <= 0:
            raise ValueError("eps must be positive")
        self.eps = float(eps)
        self.weights: Tuple[float, float, float] = weights  # type: ignore[assignment]

    def node_distance(self, a: Node, b: Node, norm_a: float, norm_b: float) -> float:
        w_value, w_in, w_out = self.weights
        return (
            w_value * abs(norm_a - norm_b)
            + w_in * abs(a.fan_in - b.fan_in)
            + w_out * abs(a.fan_out - b.fan_out)
        )

    def compare(self, g1: Graph, g2: Graph) -> ComparisonResult:
        if g1.is_empty or g2.is_empty:
            logger.debug(
                "Comparison undefined: %d vs %d nodes", len(g1.nodes), len(g2.nodes)
            )
            return ComparisonResult(
                score=UNDEFINED,
                matched=0,
                total=len(g1.nodes),
                left_source=g1.source,
                right_source=g2.source,
            )

        lo, hi = value_range(g1, g2) or (0.0, 0.0)
        norm1 = [normalize(n.value, lo, hi) for n in g1.nodes]
        norm2 = [normalize(n.value, lo, hi) for n in g2.nodes]

        matches: List[NodeMatch] = []
        for i, left in enumerate(g1.nodes):
            best = math.inf
            best_name: Optional[str] = None
            for j, right in enumerate(g2.nodes):
                dist = self.node_distance(left, right, norm1[i], norm2[j])
                if dist < best:
                    best = dist
                    best_name = right.name
            matches.append(
                NodeMatch(name=left.name, best_match=best_name, distance=best, matched=best < self.eps)
            )

        matched = sum(1 for m in matches if m.matched)
        score = 1.0 - matched / len(g1.nodes)
        return ComparisonResult(
            score=score,
            matched=matched,
            total=len(g1.nodes),
            matches=matches,
            left_source=g1.source,
            right_source=g2.source,
        )

    def distance(self, g1: Graph, g2: Graph) -> float:
        return self.compare(g1, g2).score


def graph_distance(g1: Graph, g2: Graph) -> float:
    return SimilarityEngine().distance(g1, g2)
