"""Coverage tree nodes and the rollup (aggregation) rules.

A :class:`CoverageNode` owns its children exclusively and keeps only the
counts measured directly on it. Rolled-up ratios are derived on demand:

    aggregate(N, L) = leaf_counts(N)[L] + sum(aggregate(child, L) for child in N)

Nodes are mutable while a tree is being built and become read-only once
:meth:`CoverageNode.freeze` has been called; only frozen nodes cache their
aggregates, so a cached value can never go stale.
"""

from __future__ import annotations

import hashlib
from types import MappingProxyType
from typing import TYPE_CHECKING

from covtree.errors import CyclicTreeError, OwnershipError, StructureError
from covtree.model.ratio import UNSET, Ratio
from covtree.model.types import CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

QUALIFIED_NAME_SEPARATOR = "/"

_ID_DIGEST_SIZE = 8


def node_id(qualified_name: str) -> str:
    """Return a drill-down identifier that is stable across processes."""
    digest = hashlib.blake2b(qualified_name.encode("utf-8"), digest_size=_ID_DIGEST_SIZE)
    return digest.hexdigest()


def join_name(parent: str, name: str) -> str:
    return f"{parent}{QUALIFIED_NAME_SEPARATOR}{name}" if parent else name


class CoverageNode:
    """One entity (module, package, file, ...) of the coverage hierarchy."""

    __slots__ = ("_aggregates", "_children", "_frozen", "_leaf_counts", "_owned", "level", "name")

    def __init__(self, level: CoverageLevel, name: str) -> None:
        self.level = level
        self.name = name
        self._children: dict[tuple[CoverageLevel, str], CoverageNode] = {}
        self._leaf_counts: dict[CoverageLevel, Ratio] = {}
        self._aggregates: dict[CoverageLevel, Ratio] = {}
        self._owned = False
        self._frozen = False

    def __repr__(self) -> str:
        return f"CoverageNode({self.level.name}, {self.name!r}, children={len(self._children)})"

    # ------------------------------------------------------------------ #
    # Structure                                                          #
    # ------------------------------------------------------------------ #

    @property
    def children(self) -> tuple[CoverageNode, ...]:
        return tuple(self._children.values())

    @property
    def leaf_counts(self) -> Mapping[CoverageLevel, Ratio]:
        return MappingProxyType(self._leaf_counts)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def has_children(self) -> bool:
        return bool(self._children)

    def get_child(self, level: CoverageLevel, name: str) -> CoverageNode | None:
        return self._children.get((level, name))

    def add_child(self, child: CoverageNode) -> CoverageNode:
        """Attach *child* and return it.

        Raises
        ------
        CyclicTreeError
            When *child* is this node or one of its ancestors.
        OwnershipError
            When *child* is already attached to another parent, or a sibling with
            the same level and name exists.
        StructureError
            When *child* is not finer than this node (packages may nest), or this
            node is frozen.
        """
        self._check_mutable()
        if child is self or child.contains(self):
            msg = f"attaching {child.name!r} under {self.name!r} would create a cycle"
            raise CyclicTreeError(msg)
        if child._owned:  # noqa: SLF001
            msg = f"node {child.name!r} already belongs to another parent"
            raise OwnershipError(msg)
        nested_package = child.level is CoverageLevel.PACKAGE and self.level is CoverageLevel.PACKAGE
        if not (child.level.is_finer_than(self.level) or nested_package):
            msg = f"a {child.level.name} node cannot be placed below a {self.level.name} node"
            raise StructureError(msg)
        key = (child.level, child.name)
        if key in self._children:
            msg = f"{self.name!r} already has a {child.level.name} child named {child.name!r}"
            raise OwnershipError(msg)
        child._owned = True  # noqa: SLF001
        self._children[key] = child
        return child

    def get_or_create_child(self, level: CoverageLevel, name: str) -> CoverageNode:
        existing = self.get_child(level, name)
        if existing is not None:
            return existing
        return self.add_child(CoverageNode(level, name))

    def add_leaf_count(self, level: CoverageLevel, ratio: Ratio) -> None:
        """Record a count measured directly on this node, merging with earlier ones."""
        self._check_mutable()
        self._leaf_counts[level] = self._leaf_counts.get(level, UNSET).combine(ratio)

    def contains(self, other: CoverageNode) -> bool:
        """True when *other* is this node or one of its descendants (by identity)."""
        if other is self:
            return True
        return any(child.contains(other) for child in self._children.values())

    def freeze(self) -> CoverageNode:
        """Make this subtree read-only and enable aggregate caching."""
        for child in self._children.values():
            child.freeze()
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            msg = f"node {self.name!r} is frozen and cannot be modified"
            raise StructureError(msg)

    # ------------------------------------------------------------------ #
    # Aggregation                                                        #
    # ------------------------------------------------------------------ #

    def aggregate(self, level: CoverageLevel) -> Ratio:
        """Rolled-up ratio of *level* over this node and all its descendants."""
        if self._frozen:
            cached = self._aggregates.get(level)
            if cached is not None:
                return cached
        result = UNSET
        for child in self._children.values():
            result = result.combine(child.aggregate(level))
        result = result.combine(self._leaf_counts.get(level, UNSET))
        if self._frozen:
            self._aggregates[level] = result
        return result

    def levels(self) -> set[CoverageLevel]:
        """Every level with a leaf count somewhere in this subtree."""
        out = set(self._leaf_counts)
        for child in self._children.values():
            out |= child.levels()
        return out

    def aggregates(self) -> dict[CoverageLevel, Ratio]:
        """Rolled-up ratio for every measured level, coarsest level first."""
        out: dict[CoverageLevel, Ratio] = {}
        for level in sorted(self.levels()):
            ratio = self.aggregate(level)
            if ratio.is_set():
                out[level] = ratio
        return out

    # ------------------------------------------------------------------ #
    # Traversal                                                          #
    # ------------------------------------------------------------------ #

    def iter_nodes(self, prefix: str = "") -> Iterator[tuple[str, CoverageNode]]:
        """Yield ``(qualified_name, node)`` pairs in pre-order.

        Names are relative to this node, which itself is reported as *prefix*.
        """
        yield prefix, self
        for child in self._children.values():
            yield from child.iter_nodes(join_name(prefix, child.name))

    def iter_with_parent(self) -> Iterator[tuple[CoverageNode | None, CoverageNode]]:
        """Yield ``(parent, node)`` pairs in pre-order; the start node has no parent."""
        stack: list[tuple[CoverageNode | None, CoverageNode]] = [(None, self)]
        while stack:
            parent, node = stack.pop()
            yield parent, node
            stack.extend((node, child) for child in reversed(node.children))

    def all_nodes_of_level(self, level: CoverageLevel) -> list[CoverageNode]:
        return [node for _name, node in self.iter_nodes() if node.level is level]

    def find(self, level: CoverageLevel, identifier: str) -> CoverageNode | None:
        """Look up a descendant by level and :func:`node_id` of its qualified name."""
        for qualified_name, node in self.iter_nodes():
            if node.level is level and node_id(qualified_name) == identifier:
                return node
        return None

    def find_by_name(self, qualified_name: str) -> CoverageNode | None:
        node: CoverageNode | None = self
        if not qualified_name:
            return node
        for segment in qualified_name.split(QUALIFIED_NAME_SEPARATOR):
            if node is None:
                return None
            node = next((child for child in node.children if child.name == segment), None)
        return node

    def parent_name(self, node: CoverageNode) -> str | None:
        """Name of *node*'s parent within this subtree, found by traversal."""
        for parent, candidate in self.iter_with_parent():
            if candidate is node:
                return parent.name if parent is not None else None
        return None

    # ------------------------------------------------------------------ #
    # Conversion                                                         #
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, object]:
        """Plain nested representation; two equal dicts describe the same tree."""
        return {
            "level": self.level.value,
            "name": self.name,
            "counts": {
                level.value: [ratio.covered, ratio.total] for level, ratio in sorted(self._leaf_counts.items())
            },
            "children": [child.to_dict() for child in self._children.values()],
        }


# ---------------------------------------------------------------------------
# Functional surface
# ---------------------------------------------------------------------------


def aggregate(node: CoverageNode, level: CoverageLevel) -> Ratio:
    return node.aggregate(level)


def find(node: CoverageNode, level: CoverageLevel, identifier: str) -> CoverageNode | None:
    return node.find(level, identifier)


def all_nodes_of_level(node: CoverageNode, level: CoverageLevel) -> list[CoverageNode]:
    return node.all_nodes_of_level(level)


__all__ = [
    "QUALIFIED_NAME_SEPARATOR",
    "CoverageNode",
    "aggregate",
    "all_nodes_of_level",
    "find",
    "join_name",
    "node_id",
]
