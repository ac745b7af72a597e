"""GraphDiff CLI: live structural comparison of rank-annotated DOT graphs."""

__version__ = "0.1.0"
