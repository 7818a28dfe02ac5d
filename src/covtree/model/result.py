from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from covtree.errors import DeltaAlreadyComputedError
from covtree.model.types import CoverageLevel, DeltaPercent

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covtree.model.node import CoverageNode
    from covtree.model.ratio import Ratio


@dataclass(frozen=True, slots=True)
class BuildIssue:
    """A leaf fact that was skipped while building a tree."""

    index: int
    path: tuple[str, ...]
    reason: str

    def __str__(self) -> str:
        shown = "/".join(self.path) if self.path else "<empty path>"
        return f"fact #{self.index} ({shown}): {self.reason}"


@dataclass(slots=True)
class CoverageResult:
    """Coverage tree of one build plus the delta against its reference build.

    Notes
    -----
    - ``owner`` is an opaque handle for the build this result belongs to; it is
      never interpreted here.
    - ``delta_results`` stays ``None`` until :meth:`record_delta` is called, which
      may happen at most once.
    """

    root: CoverageNode
    owner: object = None
    qualified_name: str = ""
    issues: tuple[BuildIssue, ...] = ()
    _delta: dict[CoverageLevel, DeltaPercent] | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def level(self) -> CoverageLevel:
        return self.root.level

    @property
    def delta_results(self) -> Mapping[CoverageLevel, DeltaPercent]:
        if self._delta is None:
            return MappingProxyType({})
        return MappingProxyType(self._delta)

    @property
    def has_reference(self) -> bool:
        return self._delta is not None

    def has_delta(self, level: CoverageLevel) -> bool:
        return self._delta is not None and level in self._delta

    def record_delta(self, delta: Mapping[CoverageLevel, DeltaPercent]) -> None:
        if self._delta is not None:
            msg = f"delta results for {self.root.name!r} were already recorded"
            raise DeltaAlreadyComputedError(msg)
        self._delta = dict(delta)

    def results(self) -> dict[CoverageLevel, Ratio]:
        """Whole-tree aggregate for every measured level."""
        return self.root.aggregates()

    def aggregate(self, level: CoverageLevel) -> Ratio:
        return self.root.aggregate(level)

    def find(self, level: CoverageLevel, identifier: str) -> CoverageNode | None:
        return self.root.find(level, identifier)


__all__ = ["BuildIssue", "CoverageResult"]
