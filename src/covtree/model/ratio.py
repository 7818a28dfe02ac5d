from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import TYPE_CHECKING

from covtree.errors import InconsistentRatioError
from covtree.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Ratio:
    """Covered/total pair for one coverage measurement.

    Ratios combine by adding both components; percentages are never averaged,
    which would give a tiny file the same weight as a large one.
    """

    covered: int = 0
    total: int = 0

    def __post_init__(self) -> None:
        """Reject non-integer, negative or inconsistent counts."""
        for value in (self.covered, self.total):
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"Ratio counts must be integers, got {self.covered!r}/{self.total!r}"
                raise InconsistentRatioError(msg)
        if self.covered < 0 or self.total < 0:
            msg = f"Ratio counts must be >= 0, got {self.covered}/{self.total}"
            raise InconsistentRatioError(msg)
        if self.covered > self.total:
            msg = f"Ratio.covered must be <= total, got {self.covered}/{self.total}"
            raise InconsistentRatioError(msg)

    @classmethod
    def combine_all(cls, ratios: Iterable[Ratio]) -> Ratio:
        covered = total = 0
        for ratio in ratios:
            covered += ratio.covered
            total += ratio.total
        return cls(covered=covered, total=total)

    @property
    def missed(self) -> int:
        return self.total - self.covered

    def is_set(self) -> bool:
        return self.total > 0

    @property
    def covered_percentage(self) -> float | None:
        """Covered fraction in ``[0, 1]``, ``None`` when nothing was measured."""
        if not self.is_set():
            return None
        return self.covered / self.total

    @property
    def missed_percentage(self) -> float | None:
        if not self.is_set():
            return None
        return 1 - self.covered / self.total

    @property
    def percentage(self) -> Fraction | None:
        """Exact covered percentage in ``[0, 100]``."""
        if not self.is_set():
            return None
        return Fraction(self.covered * FULL_COVERAGE, self.total)

    def combine(self, other: Ratio) -> Ratio:
        if not other.is_set():
            return self
        if not self.is_set():
            return other
        return Ratio(covered=self.covered + other.covered, total=self.total + other.total)

    def __add__(self, other: object) -> Ratio:
        if not isinstance(other, Ratio):
            return NotImplemented
        return self.combine(other)

    def format_percentage(self) -> str:
        """Whole-number percentage text, or ``n/a`` when unset."""
        pct = self.percentage
        if pct is None:
            return "n/a"
        return f"{round(pct)}%"

    def __str__(self) -> str:
        return f"{self.covered}/{self.total}"


UNSET = Ratio()
"""Identity element of :meth:`Ratio.combine`."""


__all__ = ["UNSET", "Ratio"]
