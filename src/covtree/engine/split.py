"""Turn flat dotted package names into nested package nodes.

``com.example.a`` and ``com.example.b`` become ``com -> example -> {a, b}``.
The transform only changes the shape of the tree: children and counts of a
flat package move to its last segment and the intermediate segments carry no
counts of their own, so every rolled-up ratio of the root (and of every
module) is unchanged. The input tree is left untouched.
"""

from __future__ import annotations

from covtree.config import PACKAGE_SEPARATOR
from covtree.model.node import CoverageNode
from covtree.model.types import CoverageLevel


def package_segments(name: str, separator: str = PACKAGE_SEPARATOR) -> list[str]:
    """Split *name* on *separator*, dropping empty segments."""
    segments = [segment for segment in name.split(separator) if segment]
    return segments or [name]


def _copy_counts(source: CoverageNode, target: CoverageNode) -> None:
    for level, ratio in source.leaf_counts.items():
        target.add_leaf_count(level, ratio)


def _split_into(parent: CoverageNode, node: CoverageNode, separator: str) -> None:
    if node.level is CoverageLevel.PACKAGE:
        target = parent
        for segment in package_segments(node.name, separator):
            target = target.get_or_create_child(CoverageLevel.PACKAGE, segment)
    else:
        target = parent.get_or_create_child(node.level, node.name)
    _copy_counts(node, target)
    for child in node.children:
        _split_into(target, child, separator)


def split_packages(root: CoverageNode, *, separator: str = PACKAGE_SEPARATOR) -> CoverageNode:
    """Return a frozen copy of *root* whose package nodes have single-segment names.

    Running it on its own output yields an identical tree.
    """
    new_root = CoverageNode(root.level, root.name)
    _copy_counts(root, new_root)
    for child in root.children:
        _split_into(new_root, child, separator)
    return new_root.freeze()


__all__ = ["package_segments", "split_packages"]
