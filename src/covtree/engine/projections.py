"""Read-only views of a coverage tree: treemap nodes, per-file table, totals.

Projections allocate their own objects and keep no reference to the tree
they were made from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covtree.config import DEFAULT_CHART_METRIC, DEFAULT_TABLE_LEVELS
from covtree.model.node import node_id
from covtree.model.types import CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covtree.model.node import CoverageNode
    from covtree.model.ratio import Ratio
    from covtree.model.result import CoverageResult

# Percentage bounds for the treemap colour scale.
GREEN_THRESHOLD = 90.0
YELLOW_THRESHOLD = 75.0

_COLOR_GOOD = "#1a9850"
_COLOR_FAIR = "#fee08b"
_COLOR_POOR = "#d73027"
_COLOR_NONE = "#bdbdbd"


# -----------------------------------------------------------------------------
# Treemap
# -----------------------------------------------------------------------------


def color_for(ratio: Ratio) -> str:
    pct = ratio.percentage
    if pct is None:
        return _COLOR_NONE
    if pct >= GREEN_THRESHOLD:
        return _COLOR_GOOD
    if pct >= YELLOW_THRESHOLD:
        return _COLOR_FAIR
    return _COLOR_POOR


@dataclass(frozen=True, slots=True)
class ChartNode:
    """One rectangle of the coverage treemap."""

    name: str
    level: CoverageLevel
    value: Ratio
    children: tuple[ChartNode, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """ECharts treemap shape: ``value`` is ``[total, covered]``."""
        out: dict[str, object] = {
            "name": self.name,
            "value": [self.value.total, self.value.covered],
            "itemStyle": {"color": color_for(self.value)},
        }
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


def to_chart_tree(
    node: CoverageNode,
    *,
    metric: CoverageLevel = DEFAULT_CHART_METRIC,
    max_level: CoverageLevel | None = CoverageLevel.FILE,
) -> ChartNode:
    """Project *node* into treemap nodes sized by its *metric* ratio.

    Nodes finer than *max_level* are not expanded; ``None`` expands everything.
    """
    children: tuple[ChartNode, ...] = ()
    if max_level is None or node.level < max_level:
        children = tuple(
            to_chart_tree(child, metric=metric, max_level=max_level)
            for child in node.children
            if max_level is None or child.level <= max_level
        )
    return ChartNode(name=node.name, level=node.level, value=node.aggregate(metric), children=children)


# -----------------------------------------------------------------------------
# Per-file table
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CoverageRow:
    """One file of the coverage table."""

    package_name: str
    file_name: str
    qualified_name: str
    coverages: tuple[tuple[CoverageLevel, Ratio], ...]

    @property
    def file_id(self) -> str:
        return node_id(self.qualified_name)

    @property
    def link(self) -> str:
        """Drill-down link understood by :class:`covtree.engine.routes.Router`."""
        return f"{CoverageLevel.FILE.value}.{self.file_id}"

    def coverage(self, level: CoverageLevel) -> Ratio | None:
        for row_level, ratio in self.coverages:
            if row_level is level:
                return ratio
        return None

    def coverage_value(self, level: CoverageLevel) -> str:
        ratio = self.coverage(level)
        return "n/a" if ratio is None else ratio.format_percentage()


@dataclass(frozen=True, slots=True)
class CoverageTable:
    """Flat listing of every file with its own coverage at the configured levels."""

    rows: tuple[CoverageRow, ...]
    levels: tuple[CoverageLevel, ...] = DEFAULT_TABLE_LEVELS
    table_id: str = field(default="coverage-details")

    @classmethod
    def from_tree(
        cls,
        root: CoverageNode,
        *,
        levels: Sequence[CoverageLevel] = DEFAULT_TABLE_LEVELS,
    ) -> CoverageTable:
        table_levels = tuple(levels)
        names = (qualified_name for qualified_name, _node in root.iter_nodes())
        rows = [
            CoverageRow(
                package_name=parent.name if parent is not None else "",
                file_name=node.name,
                qualified_name=qualified_name,
                coverages=tuple((level, node.aggregate(level)) for level in table_levels),
            )
            for qualified_name, (parent, node) in zip(names, root.iter_with_parent(), strict=True)
            if node.level is CoverageLevel.FILE
        ]
        return cls(rows=tuple(rows), levels=table_levels)

    def columns(self) -> list[tuple[str, str]]:
        """``(header, key)`` pairs in display order."""
        cols = [("Package", "package_name"), ("File", "file_name")]
        cols.extend((f"{level.display_name} Coverage", level.value) for level in self.levels)
        return cols


# -----------------------------------------------------------------------------
# Overall statistics
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CoverageStatistics:
    level: CoverageLevel
    ratio: Ratio
    delta: int | None = None

    @property
    def name(self) -> str:
        return self.level.display_name


def overall_statistics(result: CoverageResult) -> list[CoverageStatistics]:
    """Whole-tree ratio per measured level, finest level first."""
    results = result.results()
    return [
        CoverageStatistics(
            level=level,
            ratio=results[level],
            delta=result.delta_results.get(level),
        )
        for level in sorted(results, reverse=True)
    ]


__all__ = [
    "ChartNode",
    "CoverageRow",
    "CoverageStatistics",
    "CoverageTable",
    "color_for",
    "overall_statistics",
    "to_chart_tree",
]
