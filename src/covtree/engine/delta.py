"""Coverage change between a candidate build and its reference build.

Both trees are built independently from their own leaf facts, so nodes are
matched by qualified name, never by object identity. Missing data never
raises: a level that is not measured on both sides simply has no delta.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covtree.model.types import CoverageLevel, DeltaPercent

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covtree.model.node import CoverageNode
    from covtree.model.ratio import Ratio
    from covtree.model.result import CoverageResult

logger = logging.getLogger("covtree")


def percentage_delta(candidate: Ratio, reference: Ratio) -> DeltaPercent | None:
    """Whole percentage points gained (or lost) from *reference* to *candidate*.

    ``None`` unless both ratios are set. The difference is taken on exact
    fractions and rounded half to even, so swapping the arguments only flips
    the sign.
    """
    cand_pct = candidate.percentage
    ref_pct = reference.percentage
    if cand_pct is None or ref_pct is None:
        return None
    return round(cand_pct - ref_pct)


def level_deltas(
    candidate: Mapping[CoverageLevel, Ratio],
    reference: Mapping[CoverageLevel, Ratio],
) -> dict[CoverageLevel, DeltaPercent]:
    """Per-level delta for every level measured in both aggregate maps."""
    out: dict[CoverageLevel, DeltaPercent] = {}
    for level in sorted(set(candidate) & set(reference)):
        delta = percentage_delta(candidate[level], reference[level])
        if delta is not None:
            out[level] = delta
    return out


def compute_delta(candidate: CoverageResult, reference: CoverageResult) -> dict[CoverageLevel, DeltaPercent]:
    """Compare whole-tree aggregates and record the result on *candidate*.

    The reference result is never modified: only the later build records the
    change since its reference.
    """
    delta = level_deltas(candidate.results(), reference.results())
    if not delta:
        logger.warning(
            "reference %r has no coverage level in common with %r; delta is empty",
            reference.name,
            candidate.name,
        )
    candidate.record_delta(delta)
    return delta


@dataclass(frozen=True, slots=True)
class TreeDiff:
    """Name-based comparison of the nodes of one level in two trees."""

    level: CoverageLevel
    matched: dict[str, dict[CoverageLevel, DeltaPercent]] = field(default_factory=dict)
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    def regressions(self) -> dict[str, dict[CoverageLevel, DeltaPercent]]:
        """Matched nodes where at least one level lost coverage."""
        return {
            name: deltas for name, deltas in self.matched.items() if any(value < 0 for value in deltas.values())
        }


def _index(root: CoverageNode, level: CoverageLevel) -> dict[str, CoverageNode]:
    return {name: node for name, node in root.iter_nodes() if node.level is level}


def diff_trees(
    candidate: CoverageNode,
    reference: CoverageNode,
    *,
    level: CoverageLevel = CoverageLevel.FILE,
) -> TreeDiff:
    """Match the *level* nodes of two trees by qualified name and compare them.

    Nodes present on one side only are reported as added or removed and get no
    delta of their own; they still count in the ancestors' totals on their side.
    """
    cand_nodes = _index(candidate, level)
    ref_nodes = _index(reference, level)

    matched: dict[str, dict[CoverageLevel, DeltaPercent]] = {}
    for name, node in cand_nodes.items():
        other = ref_nodes.get(name)
        if other is None:
            continue
        matched[name] = level_deltas(node.aggregates(), other.aggregates())

    added = tuple(name for name in cand_nodes if name not in ref_nodes)
    removed = tuple(name for name in ref_nodes if name not in cand_nodes)
    logger.debug(
        "diff at %s level: %d matched, %d added, %d removed",
        level.value,
        len(matched),
        len(added),
        len(removed),
    )
    return TreeDiff(level=level, matched=matched, added=added, removed=removed)


__all__ = ["TreeDiff", "compute_delta", "diff_trees", "level_deltas", "percentage_delta"]
