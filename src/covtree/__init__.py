import logging
from importlib.metadata import version

from covtree.engine import (
    LeafFact,
    TreeBuilder,
    build_tree,
    compute_delta,
    diff_trees,
    split_packages,
    to_chart_tree,
)
from covtree.model import (
    CoverageLevel,
    CoverageNode,
    CoverageResult,
    Ratio,
    aggregate,
    all_nodes_of_level,
    find,
)

__version__ = version("covtree")

logger = logging.getLogger(__name__)

__all__ = [
    "CoverageLevel",
    "CoverageNode",
    "CoverageResult",
    "LeafFact",
    "Ratio",
    "TreeBuilder",
    "__version__",
    "aggregate",
    "all_nodes_of_level",
    "build_tree",
    "compute_delta",
    "diff_trees",
    "find",
    "logger",
    "split_packages",
    "to_chart_tree",
]
