"""Shared type aliases and enumerations used across covtree."""

from __future__ import annotations

from enum import StrEnum
from typing import TypeAlias

# ---------------------------------------------------------------------------
# Common type aliases
# ---------------------------------------------------------------------------

DeltaPercent: TypeAlias = int
"""Signed difference of two coverage percentages, in whole percentage points."""

FULL_COVERAGE: int = 100


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CoverageLevel(StrEnum):
    """Granularity of a node or counter in the coverage hierarchy.

    Members are declared outermost first; comparisons follow that order so
    ``MODULE < PACKAGE < ... < CONDITIONAL`` and ``sorted(levels)`` lists the
    coarsest level first. ``REPORT`` only tags the synthetic root of a build.
    """

    REPORT = "report"
    MODULE = "module"
    PACKAGE = "package"
    FILE = "file"
    CLASS = "class"
    METHOD = "method"
    LINE = "line"
    CONDITIONAL = "conditional"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def is_structural(self) -> bool:
        """True for levels that name nodes on a path (module .. method)."""
        return self in STRUCTURAL_LEVELS

    @property
    def is_measured(self) -> bool:
        """True for levels that only ever appear as counters (line, conditional)."""
        return self in MEASURED_LEVELS

    def is_finer_than(self, other: CoverageLevel) -> bool:
        return self.rank > other.rank

    @classmethod
    def parse(cls, text: str) -> CoverageLevel:
        """Resolve a level from its value or (case-insensitive) name."""
        key = text.strip().lower()
        if key == "branch":
            return cls.CONDITIONAL
        try:
            return cls(key)
        except ValueError as exc:
            choices = ", ".join(level.value for level in cls)
            msg = f"unknown coverage level: {text!r}. Available levels: {choices}"
            raise ValueError(msg) from exc

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CoverageLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CoverageLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CoverageLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CoverageLevel):
            return NotImplemented
        return self.rank >= other.rank


_RANKS: dict[CoverageLevel, int] = {level: index for index, level in enumerate(CoverageLevel)}

STRUCTURAL_LEVELS: tuple[CoverageLevel, ...] = (
    CoverageLevel.MODULE,
    CoverageLevel.PACKAGE,
    CoverageLevel.FILE,
    CoverageLevel.CLASS,
    CoverageLevel.METHOD,
)
"""Levels assigned to path segments, in path order."""

MEASURED_LEVELS: tuple[CoverageLevel, ...] = (
    CoverageLevel.LINE,
    CoverageLevel.CONDITIONAL,
)


__all__ = [
    "FULL_COVERAGE",
    "MEASURED_LEVELS",
    "STRUCTURAL_LEVELS",
    "CoverageLevel",
    "DeltaPercent",
]
