"""Structured JSON output, validated against the packaged schema."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from jsonschema import validate

from covtree import __version__
from covtree.config import get_schema
from covtree.engine.projections import overall_statistics

if TYPE_CHECKING:
    from covtree.engine.delta import TreeDiff
    from covtree.engine.projections import ChartNode, CoverageTable
    from covtree.model.ratio import Ratio
    from covtree.model.result import CoverageResult


def _ratio(ratio: Ratio) -> dict[str, object]:
    pct = ratio.percentage
    return {
        "covered": ratio.covered,
        "total": ratio.total,
        "percentage": None if pct is None else round(float(pct), 2),
    }


def _statistics_payload(result: CoverageResult) -> list[dict[str, object]]:
    out: list[dict[str, object]] = []
    for stat in overall_statistics(result):
        entry: dict[str, object] = {"level": stat.level.value, **_ratio(stat.ratio)}
        if stat.delta is not None:
            entry["delta"] = stat.delta
        out.append(entry)
    return out


def _files_payload(table: CoverageTable) -> list[dict[str, object]]:
    return [
        {
            "package": row.package_name,
            "file": row.file_name,
            "id": row.file_id,
            "coverage": {level.value: _ratio(ratio) for level, ratio in row.coverages},
        }
        for row in table.rows
    ]


def _diff_payload(diff: TreeDiff) -> dict[str, object]:
    return {
        "level": diff.level.value,
        "matched": {
            name: {level.value: value for level, value in deltas.items()} for name, deltas in diff.matched.items()
        },
        "added": list(diff.added),
        "removed": list(diff.removed),
    }


def format_json(
    result: CoverageResult,
    *,
    table: CoverageTable | None = None,
    chart: ChartNode | None = None,
    diff: TreeDiff | None = None,
    schema_version: str = "v1",
) -> str:
    """Render a coverage result (and optional projections) as validated JSON."""
    schema = get_schema(schema_version)
    payload: dict[str, object] = {
        "schema": str(schema["$id"]),
        "schema_version": 1,
        "tool": {"name": "covtree", "version": __version__},
        "build": result.name,
        "statistics": _statistics_payload(result),
        "issues": [str(issue) for issue in result.issues],
    }
    if result.has_reference:
        payload["delta"] = {level.value: value for level, value in result.delta_results.items()}
    if table is not None:
        payload["files"] = _files_payload(table)
    if chart is not None:
        payload["tree"] = chart.to_dict()
    if diff is not None:
        payload["diff"] = _diff_payload(diff)

    validate(payload, schema)
    return json.dumps(payload, indent=2, sort_keys=True)


__all__ = ["format_json"]
