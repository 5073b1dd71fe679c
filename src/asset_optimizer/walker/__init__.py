"""Tree traversal and per-file dispatch."""

from asset_optimizer.walker.models import (
    FileJob,
    FileResult,
    Outcome,
    TraversalNode,
    WalkResult,
)
from asset_optimizer.walker.tree import TreeWalker

__all__ = [
    "FileJob",
    "FileResult",
    "Outcome",
    "TraversalNode",
    "TreeWalker",
    "WalkResult",
]
