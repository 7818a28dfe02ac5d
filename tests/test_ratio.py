from __future__ import annotations

import dataclasses
from fractions import Fraction

import pytest

from covtree.errors import CovtreeError, InconsistentRatioError
from covtree.model import UNSET, Ratio


def test_percentages_of_set_ratio() -> None:
    ratio = Ratio(1, 4)
    assert ratio.is_set()
    assert ratio.covered_percentage == 0.25
    assert ratio.missed_percentage == 0.75
    assert ratio.percentage == Fraction(25)
    assert ratio.missed == 3


def test_unset_ratio_has_no_percentage() -> None:
    ratio = Ratio()
    assert not ratio.is_set()
    assert ratio.covered_percentage is None
    assert ratio.missed_percentage is None
    assert ratio.percentage is None
    assert ratio.format_percentage() == "n/a"


@pytest.mark.parametrize(("covered", "total"), [(3, 2), (-1, 2), (0, -1)])
def test_inconsistent_counts_fail_fast(covered: int, total: int) -> None:
    with pytest.raises(InconsistentRatioError):
        Ratio(covered, total)


@pytest.mark.parametrize(("covered", "total"), [(0.5, 1), (1, 2.0), (True, 1), (0, None)])
def test_non_integer_counts_fail_fast(covered: object, total: object) -> None:
    with pytest.raises(InconsistentRatioError, match="integers"):
        Ratio(covered, total)  # type: ignore[arg-type]


def test_inconsistent_ratio_error_is_a_value_error() -> None:
    assert issubclass(InconsistentRatioError, ValueError)
    assert issubclass(InconsistentRatioError, CovtreeError)


def test_combination_adds_components() -> None:
    assert Ratio(1, 2) + Ratio(3, 4) == Ratio(4, 6)
    assert Ratio(1, 2).combine(Ratio(3, 4)) == Ratio(3, 4).combine(Ratio(1, 2))


def test_unset_is_identity_of_combination() -> None:
    ratio = Ratio(2, 5)
    assert ratio.combine(UNSET) == ratio
    assert UNSET.combine(ratio) == ratio
    assert UNSET + UNSET == UNSET


def test_combine_all() -> None:
    assert Ratio.combine_all([Ratio(1, 2), Ratio(0, 3), UNSET]) == Ratio(1, 5)
    assert Ratio.combine_all([]) == UNSET


def test_percentages_are_never_averaged() -> None:
    # 1/1 and 0/9 average to 50% but cover one line in ten
    combined = Ratio(1, 1) + Ratio(0, 9)
    assert combined.percentage == Fraction(10)


def test_format_percentage_rounds_to_whole_number() -> None:
    assert Ratio(2, 3).format_percentage() == "67%"
    assert Ratio(4, 4).format_percentage() == "100%"
    assert str(Ratio(2, 3)) == "2/3"


def test_ratio_is_immutable() -> None:
    ratio = Ratio(1, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        ratio.covered = 2  # type: ignore[misc]


def test_add_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        Ratio(1, 2) + (1, 2)  # type: ignore[operator]
