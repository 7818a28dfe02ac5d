from __future__ import annotations

import pytest

from covtree.model import MEASURED_LEVELS, STRUCTURAL_LEVELS, CoverageLevel


def test_levels_are_ordered_outermost_first() -> None:
    ordered = [
        CoverageLevel.MODULE,
        CoverageLevel.PACKAGE,
        CoverageLevel.FILE,
        CoverageLevel.CLASS,
        CoverageLevel.METHOD,
        CoverageLevel.LINE,
        CoverageLevel.CONDITIONAL,
    ]
    assert sorted(reversed(ordered)) == ordered
    assert CoverageLevel.MODULE < CoverageLevel.CONDITIONAL
    assert CoverageLevel.LINE >= CoverageLevel.FILE
    assert CoverageLevel.REPORT < CoverageLevel.MODULE


def test_order_is_not_alphabetical() -> None:
    # "conditional" < "file" as strings, but not as levels
    assert CoverageLevel.FILE < CoverageLevel.CONDITIONAL
    assert max(CoverageLevel.CONDITIONAL, CoverageLevel.FILE) is CoverageLevel.CONDITIONAL


def test_level_values_compare_as_strings() -> None:
    assert CoverageLevel.LINE == "line"
    assert CoverageLevel.CONDITIONAL.display_name == "Conditional"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("line", CoverageLevel.LINE),
        ("Line", CoverageLevel.LINE),
        (" FILE ", CoverageLevel.FILE),
        ("branch", CoverageLevel.CONDITIONAL),
    ],
)
def test_parse(text: str, expected: CoverageLevel) -> None:
    assert CoverageLevel.parse(text) is expected


def test_parse_unknown_level_lists_choices() -> None:
    with pytest.raises(ValueError, match="Available levels"):
        CoverageLevel.parse("statement")


def test_structural_and_measured_levels() -> None:
    assert all(level.is_structural for level in STRUCTURAL_LEVELS)
    assert all(level.is_measured for level in MEASURED_LEVELS)
    assert not CoverageLevel.REPORT.is_structural
    assert not CoverageLevel.REPORT.is_measured
    assert CoverageLevel.METHOD.is_finer_than(CoverageLevel.CLASS)
    assert not CoverageLevel.PACKAGE.is_finer_than(CoverageLevel.PACKAGE)
