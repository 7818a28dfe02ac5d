"""Tree construction, restructuring, delta computation and projections."""

from .builder import LeafFact, TreeBuilder, build_tree
from .delta import TreeDiff, compute_delta, diff_trees
from .projections import (
    ChartNode,
    CoverageRow,
    CoverageStatistics,
    CoverageTable,
    overall_statistics,
    to_chart_tree,
)
from .routes import DrillDown, Router
from .split import split_packages

__all__ = [
    "ChartNode",
    "CoverageRow",
    "CoverageStatistics",
    "CoverageTable",
    "DrillDown",
    "LeafFact",
    "Router",
    "TreeBuilder",
    "TreeDiff",
    "build_tree",
    "compute_delta",
    "diff_trees",
    "overall_statistics",
    "split_packages",
    "to_chart_tree",
]
