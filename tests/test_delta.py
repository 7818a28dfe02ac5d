from __future__ import annotations

import logging

import pytest

from covtree import build_tree, compute_delta, diff_trees
from covtree.engine.delta import level_deltas, percentage_delta
from covtree.errors import DeltaAlreadyComputedError, InconsistentRatioError
from covtree.model import CoverageLevel, CoverageResult, Ratio

LINE = CoverageLevel.LINE
CONDITIONAL = CoverageLevel.CONDITIONAL
FILE = CoverageLevel.FILE
FOO = ("core", "com.example", "Foo.java")


def _result(*facts: tuple[tuple[str, ...], CoverageLevel, Ratio], **kwargs: object) -> CoverageResult:
    return build_tree(list(facts), **kwargs)  # type: ignore[arg-type]


def test_conditional_coverage_gain() -> None:
    reference = _result((FOO, CONDITIONAL, Ratio(0, 4)))
    candidate = _result((FOO, CONDITIONAL, Ratio(4, 4)))

    delta = compute_delta(candidate, reference)

    assert delta[CONDITIONAL] == 100
    assert candidate.has_delta(CONDITIONAL)
    assert candidate.delta_results[CONDITIONAL] == 100
    assert not reference.has_delta(CONDITIONAL)
    assert not reference.has_reference
    assert dict(reference.delta_results) == {}


def test_fractional_counts_are_rejected_before_any_delta() -> None:
    with pytest.raises(InconsistentRatioError):
        _result((FOO, LINE, Ratio(1.5, 4)))  # type: ignore[arg-type]
    reference = _result((FOO, LINE, Ratio(1, 4)))
    candidate = _result((FOO, LINE, Ratio(3, 4)))
    assert compute_delta(candidate, reference)[LINE] == 50


def test_line_gain_with_unchanged_file_count() -> None:
    reference = _result((FOO, LINE, Ratio(1, 2)))
    candidate = _result((FOO, LINE, Ratio(2, 2)))

    delta = compute_delta(candidate, reference)

    assert delta[LINE] == 50
    assert delta[FILE] == 0
    assert not candidate.has_delta(CONDITIONAL)


def test_delta_is_antisymmetric() -> None:
    facts_a = [(FOO, LINE, Ratio(1, 8)), (FOO, CONDITIONAL, Ratio(1, 3))]
    facts_b = [(FOO, LINE, Ratio(0, 2)), (FOO, CONDITIONAL, Ratio(2, 3))]

    forward = compute_delta(build_tree(facts_a), build_tree(facts_b))
    backward = compute_delta(build_tree(facts_b), build_tree(facts_a))

    assert set(forward) == set(backward)
    for level, value in forward.items():
        assert value == -backward[level]
    # 12.5 points round half to even
    assert forward[LINE] == 12
    assert forward[CONDITIONAL] == -33


def test_unmatched_reference_gives_empty_map(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="covtree")
    reference = _result((FOO, CONDITIONAL, Ratio(1, 2)), count_elements=False)
    candidate = _result((FOO, LINE, Ratio(1, 2)), count_elements=False)

    assert compute_delta(candidate, reference) == {}
    assert candidate.has_reference
    assert not candidate.has_delta(LINE)
    assert "no coverage level in common" in caplog.text


def test_delta_is_recorded_once() -> None:
    reference = _result((FOO, LINE, Ratio(1, 2)))
    candidate = _result((FOO, LINE, Ratio(2, 2)))
    compute_delta(candidate, reference)
    with pytest.raises(DeltaAlreadyComputedError):
        compute_delta(candidate, reference)


def test_trees_are_not_mutated() -> None:
    reference = _result((FOO, LINE, Ratio(1, 2)))
    candidate = _result((FOO, LINE, Ratio(2, 2)))
    ref_before = reference.root.to_dict()
    cand_before = candidate.root.to_dict()
    compute_delta(candidate, reference)
    assert reference.root.to_dict() == ref_before
    assert candidate.root.to_dict() == cand_before


def test_percentage_delta_needs_both_sides() -> None:
    assert percentage_delta(Ratio(), Ratio(1, 2)) is None
    assert percentage_delta(Ratio(1, 2), Ratio()) is None
    assert percentage_delta(Ratio(1, 3), Ratio(0, 3)) == 33


def test_level_deltas_skips_unset_levels() -> None:
    candidate = {LINE: Ratio(1, 1), CONDITIONAL: Ratio()}
    reference = {LINE: Ratio(0, 1), CONDITIONAL: Ratio(1, 2)}
    assert level_deltas(candidate, reference) == {LINE: 100}


# --------------------------------------------------------------------------- #
# structural diff                                                             #
# --------------------------------------------------------------------------- #


def _file(name: str) -> tuple[str, ...]:
    return ("core", "com.example", name)


def test_diff_trees_matches_by_qualified_name() -> None:
    reference = _result((_file("A.java"), LINE, Ratio(1, 2)), (_file("B.java"), LINE, Ratio(1, 1)))
    candidate = _result((_file("A.java"), LINE, Ratio(2, 2)), (_file("C.java"), LINE, Ratio(0, 1)))

    diff = diff_trees(candidate.root, reference.root)

    assert diff.level is FILE
    assert diff.matched == {"core/com.example/A.java": {FILE: 0, LINE: 50}}
    assert diff.added == ("core/com.example/C.java",)
    assert diff.removed == ("core/com.example/B.java",)
    assert diff.regressions() == {}


def test_diff_trees_reports_regressions() -> None:
    reference = _result((_file("A.java"), LINE, Ratio(2, 2)))
    candidate = _result((_file("A.java"), LINE, Ratio(1, 2)))
    diff = diff_trees(candidate.root, reference.root)
    assert diff.regressions() == {"core/com.example/A.java": {FILE: 0, LINE: -50}}


def test_diff_trees_at_package_level() -> None:
    reference = _result((_file("A.java"), LINE, Ratio(0, 2)))
    candidate = _result(
        (_file("A.java"), LINE, Ratio(1, 2)),
        (("core", "org.other", "B.java"), LINE, Ratio(1, 1)),
    )
    diff = diff_trees(candidate.root, reference.root, level=CoverageLevel.PACKAGE)
    assert set(diff.matched) == {"core/com.example"}
    assert diff.matched["core/com.example"][LINE] == 50
    assert diff.added == ("core/org.other",)
    assert diff.removed == ()
