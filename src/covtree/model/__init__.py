"""Domain model for covtree (pure types + rollup rules; no IO)."""

from .node import CoverageNode, aggregate, all_nodes_of_level, find, node_id
from .ratio import UNSET, Ratio
from .result import BuildIssue, CoverageResult
from .types import MEASURED_LEVELS, STRUCTURAL_LEVELS, CoverageLevel

__all__ = [
    "MEASURED_LEVELS",
    "STRUCTURAL_LEVELS",
    "UNSET",
    "BuildIssue",
    "CoverageLevel",
    "CoverageNode",
    "CoverageResult",
    "Ratio",
    "aggregate",
    "all_nodes_of_level",
    "find",
    "node_id",
]
