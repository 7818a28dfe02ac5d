"""Drill-down routing: map a link such as ``file.<id>`` to a node of the tree.

The routing table is explicit (segment -> handler) so a presentation layer can
add its own entries without the engine knowing about URLs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covtree.model.types import STRUCTURAL_LEVELS, CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Callable

    from covtree.model.node import CoverageNode

    Handler = Callable[[CoverageNode, str], "CoverageNode | None"]

logger = logging.getLogger("covtree")

LINK_SEPARATOR = "."


@dataclass(frozen=True, slots=True)
class DrillDown:
    """Where a link leads; file nodes open the source view rather than a sub-tree."""

    node: CoverageNode
    matched: bool

    @property
    def is_source_view(self) -> bool:
        return self.node.level is CoverageLevel.FILE


def _level_handler(level: CoverageLevel) -> Handler:
    def handle(root: CoverageNode, identifier: str) -> CoverageNode | None:
        return root.find(level, identifier)

    return handle


class Router:
    """Resolve drill-down links relative to one root node."""

    def __init__(self, root: CoverageNode) -> None:
        self._root = root
        self._routes: dict[str, Handler] = {level.value: _level_handler(level) for level in STRUCTURAL_LEVELS}

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._routes)

    def register(self, segment: str, handler: Handler) -> None:
        if not segment or LINK_SEPARATOR in segment:
            msg = f"invalid route segment: {segment!r}"
            raise ValueError(msg)
        self._routes[segment] = handler

    def resolve(self, link: str) -> DrillDown:
        """Follow *link*; unknown or broken links stay on the root."""
        segment, sep, identifier = link.partition(LINK_SEPARATOR)
        handler = self._routes.get(segment)
        if not sep or not identifier or handler is None:
            logger.debug("no route for link %r", link)
            return DrillDown(node=self._root, matched=False)
        target = handler(self._root, identifier)
        if target is None:
            logger.debug("link %r does not name a node", link)
            return DrillDown(node=self._root, matched=False)
        return DrillDown(node=target, matched=True)


__all__ = ["LINK_SEPARATOR", "DrillDown", "Router"]
