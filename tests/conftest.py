from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path, PurePosixPath

import pytest
from click.testing import CliRunner

from covtree.model import CoverageLevel, Ratio

# line number -> hits, or (hits, "covered/total") for a branch line
LinesSpec = Mapping[int, int | tuple[int, str]] | Iterable[int]

Fact = tuple[tuple[str, ...], CoverageLevel, Ratio]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def make_facts() -> Callable[..., list[Fact]]:
    """Build leaf facts from ``{"module/package/File.java": {"line": (1, 2)}}``."""

    def build(mapping: Mapping[str, Mapping[str, tuple[int, int]]]) -> list[Fact]:
        facts: list[Fact] = []
        for path, counts in mapping.items():
            segments = tuple(path.split("/"))
            for level, (covered, total) in counts.items():
                facts.append((segments, CoverageLevel.parse(level), Ratio(covered, total)))
        return facts

    return build


def _line_xml(number: int, spec: int | tuple[int, str]) -> str:
    if isinstance(spec, tuple):
        hits, cond = spec
        covered, total = (int(part) for part in cond.split("/"))
        pct = covered * 100 // total if total else 0
        return f'<line number="{number}" hits="{hits}" branch="true" condition-coverage="{pct}% ({cond})"/>'
    return f'<line number="{number}" hits="{spec}"/>'


@pytest.fixture
def coverage_xml_content() -> Callable[..., str]:
    def build(mapping: Mapping[Path | str, LinesSpec], *, package: str = "") -> str:
        classes: list[str] = []
        for file, lines in mapping.items():
            items = lines.items() if isinstance(lines, Mapping) else ((ln, 0) for ln in lines)
            lines_xml = "".join(_line_xml(ln, spec) for ln, spec in items)
            class_name = PurePosixPath(str(file)).stem
            classes.append(f'<class name="{class_name}" filename="{file}"><lines>{lines_xml}</lines></class>')
        classes_xml = "".join(classes)
        package_attr = f' name="{package}"' if package else ""
        return (
            "<coverage>"
            f"<packages><package{package_attr}><classes>{classes_xml}</classes></package></packages>"
            "</coverage>"
        )

    return build


@pytest.fixture
def coverage_xml_file(
    tmp_path: Path,
    coverage_xml_content: Callable[..., str],
) -> Callable[..., Path]:
    def write(
        mapping: Mapping[Path | str, LinesSpec],
        *,
        package: str = "",
        filename: str = "coverage.xml",
    ) -> Path:
        xml_content = coverage_xml_content(mapping, package=package)
        xml_file = tmp_path / filename
        xml_file.write_text(xml_content, encoding="utf-8")
        return xml_file

    return write
