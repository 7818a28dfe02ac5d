"""Cobertura XML adapter: turn a report into covtree leaf facts.

This is a collaborator of the engine, not part of it; the engine only sees
the ``LeafFact`` stream produced here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from defusedxml import ElementTree

from covtree.engine.builder import LeafFact
from covtree.errors import InvalidReportError, ReportNotFoundError
from covtree.model.ratio import Ratio
from covtree.model.types import CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from xml.etree.ElementTree import Element as XmlElement  # noqa: S405

DEFAULT_MODULE_NAME = "default"
DEFAULT_PACKAGE_NAME = "(default)"

_COND_RE = re.compile(r"\(\s*(?P<covered>\d+)\s*/\s*(?P<total>\d+)\s*\)")


def read_root(path: Path) -> XmlElement:
    """Parse coverage XML and return the root element."""
    if not path.exists():
        msg = f"coverage report not found: {path}"
        raise ReportNotFoundError(msg)
    try:
        root = ElementTree.parse(path).getroot()
    except ElementTree.ParseError as exc:
        msg = f"{path}: failed to parse coverage XML: {exc}"
        raise InvalidReportError(msg) from exc
    tag = (root.tag or "").split("}")[-1]
    if tag.lower() != "coverage":
        msg = f"unexpected root tag {root.tag!r} in {path}"
        raise InvalidReportError(msg)
    return root


def parse_condition_coverage(text: str) -> tuple[int, int] | None:
    """Parse values like ``'50% (1/2)'`` into ``(covered, total)``."""
    if not text:
        return None
    m = _COND_RE.search(text.strip())
    if not m:
        return None
    covered = int(m.group("covered"))
    total = int(m.group("total"))
    if covered > total:
        return None
    return covered, total


@dataclass(slots=True)
class _LineStats:
    hits: int = 0
    branches: tuple[int, int] | None = None

    def merge(self, hits: int, branches: tuple[int, int] | None) -> None:
        self.hits = max(self.hits, hits)
        if branches is not None and (self.branches is None or branches[1] > self.branches[1]):
            self.branches = branches
        elif branches is not None and self.branches is not None and branches[1] == self.branches[1]:
            self.branches = (max(self.branches[0], branches[0]), branches[1])


@dataclass(slots=True)
class _Bucket:
    """Per-line stats of one (package, file[, class]) entity of the report."""

    lines: dict[int, _LineStats] = field(default_factory=dict)

    def ratios(self) -> dict[CoverageLevel, Ratio]:
        out: dict[CoverageLevel, Ratio] = {}
        if self.lines:
            covered = sum(1 for stats in self.lines.values() if stats.hits > 0)
            out[CoverageLevel.LINE] = Ratio(covered=covered, total=len(self.lines))
        branch_counts = [stats.branches for stats in self.lines.values() if stats.branches is not None]
        if branch_counts:
            out[CoverageLevel.CONDITIONAL] = Ratio(
                covered=sum(c for c, _t in branch_counts),
                total=sum(t for _c, t in branch_counts),
            )
        return out


def _package_name(package: XmlElement, filename: str) -> str:
    name = (package.get("name") or "").strip()
    if name:
        return name
    parent = PurePosixPath(filename.replace("\\", "/")).parent
    return ".".join(parent.parts) or DEFAULT_PACKAGE_NAME


def _iter_lines(cls: XmlElement) -> Iterator[tuple[int, int, tuple[int, int] | None]]:
    for line_elem in cls.findall("./lines/line"):
        n_raw = line_elem.get("number")
        hits_raw = line_elem.get("hits")
        if not n_raw or hits_raw is None:
            continue
        try:
            number = int(n_raw)
            hits = int(hits_raw)
        except ValueError:
            continue
        branches = None
        if line_elem.get("branch") == "true":
            branches = parse_condition_coverage(line_elem.get("condition-coverage", "") or "")
        yield number, hits, branches


def iter_root_facts(
    root: XmlElement,
    *,
    module: str = DEFAULT_MODULE_NAME,
    by_class: bool = False,
) -> Iterator[LeafFact]:
    """Yield LINE and CONDITIONAL facts for every file (or class) of *root*.

    A line listed by several ``<class>`` entries of the same file is counted
    once, keeping its highest hit count, so the facts never double report a
    physical line.
    """
    buckets: dict[tuple[str, ...], _Bucket] = {}
    claimed: dict[tuple[str, str], dict[int, _LineStats]] = {}

    for package in root.findall(".//packages/package"):
        for cls in package.findall("./classes/class"):
            filename = cls.get("filename")
            if not filename:
                continue
            package_name = _package_name(package, filename)
            file_name = PurePosixPath(filename.replace("\\", "/")).name
            file_lines = claimed.setdefault((package_name, file_name), {})

            path: tuple[str, ...] = (module, package_name, file_name)
            if by_class:
                class_name = (cls.get("name") or "").rsplit(".", 1)[-1] or file_name
                path = (*path, class_name)
            bucket = buckets.setdefault(path, _Bucket())

            for number, hits, branches in _iter_lines(cls):
                stats = file_lines.get(number)
                if stats is None:
                    stats = file_lines[number] = _LineStats()
                    bucket.lines[number] = stats
                stats.merge(hits, branches)

    for path, bucket in buckets.items():
        for level, ratio in bucket.ratios().items():
            yield LeafFact(path=path, level=level, ratio=ratio)


def iter_facts(
    paths: Iterable[Path],
    *,
    module: str = DEFAULT_MODULE_NAME,
    by_class: bool = False,
) -> Iterator[LeafFact]:
    """Read every Cobertura report of *paths* and yield their leaf facts."""
    for path in paths:
        yield from iter_root_facts(read_root(Path(path)), module=module, by_class=by_class)


__all__ = [
    "DEFAULT_MODULE_NAME",
    "DEFAULT_PACKAGE_NAME",
    "iter_facts",
    "iter_root_facts",
    "parse_condition_coverage",
    "read_root",
]
