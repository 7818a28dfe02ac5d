"""Tests for configuration helpers and module side-effect behavior."""

from __future__ import annotations

import importlib
import logging
import sys
import textwrap
from typing import TYPE_CHECKING

import pytest

from covtree.config import DEFAULT_TABLE_LEVELS, Settings, load_settings, settings_from_mapping
from covtree.errors import ConfigError
from covtree.model import CoverageLevel

if TYPE_CHECKING:
    from pathlib import Path

    from _pytest.monkeypatch import MonkeyPatch


def test_get_schema_cached(monkeypatch: MonkeyPatch) -> None:
    """``get_schema`` should load the schema once and cache the result."""
    from covtree import config

    config.get_schema.cache_clear()
    calls = 0
    original = config.resources.files

    def tracking_files(package: str):
        nonlocal calls
        calls += 1
        return original(package)

    monkeypatch.setattr(config.resources, "files", tracking_files)

    schema1 = config.get_schema()
    schema2 = config.get_schema()

    assert schema1 == schema2
    assert schema1["$id"] == "urn:covtree:schema:report:v1"
    assert calls == 1
    config.get_schema.cache_clear()


def test_get_schema_unknown_version() -> None:
    from covtree import config

    with pytest.raises(ValueError, match="Available versions: v1"):
        config.get_schema("v9")


def test_import_has_no_side_effects(monkeypatch: MonkeyPatch) -> None:
    """Importing the package should not configure logging."""
    basic_called = False

    def fake_basic(*args, **kwargs):
        nonlocal basic_called
        basic_called = True

    monkeypatch.setattr(logging, "basicConfig", fake_basic)
    monkeypatch.delitem(sys.modules, "covtree")

    importlib.import_module("covtree")

    assert not basic_called


def test_missing_pyproject_gives_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "pyproject.toml") == Settings()
    assert load_settings(None) == Settings()


def test_settings_from_pyproject(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        textwrap.dedent(
            """
            [tool.covtree]
            root-name = "app"
            package-separator = "/"
            table-levels = ["line"]
            chart-metric = "branch"
            """
        ),
        encoding="utf-8",
    )
    settings = load_settings(pyproject)
    assert settings == Settings(
        root_name="app",
        package_separator="/",
        table_levels=(CoverageLevel.LINE,),
        chart_metric=CoverageLevel.CONDITIONAL,
    )


def test_pyproject_without_table_gives_defaults(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "demo"\n', encoding="utf-8")
    settings = load_settings(pyproject)
    assert settings.table_levels == DEFAULT_TABLE_LEVELS


def test_invalid_toml_warns_and_falls_back(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="covtree")
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text("[tool.covtree\n", encoding="utf-8")
    assert load_settings(pyproject) == Settings()
    assert "Failed to parse" in caplog.text


def test_non_table_section_is_an_error(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text("[tool]\ncovtree = 3\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a table"):
        load_settings(pyproject)


def test_non_table_tool_section_is_an_error(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text("tool = 3\n", encoding="utf-8")
    with pytest.raises(ConfigError, match=r"\[tool\] must be a table"):
        load_settings(pyproject)


@pytest.mark.parametrize(
    ("table", "message"),
    [
        ({"colour": "red"}, "unknown"),
        ({"chart-metric": "statement"}, "chart-metric"),
        ({"chart-metric": 3}, "must be a string"),
        ({"table-levels": "line"}, "non-empty list"),
        ({"table-levels": []}, "non-empty list"),
        ({"root-name": ""}, "non-empty string"),
    ],
)
def test_invalid_settings(table: dict[str, object], message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        settings_from_mapping(table)
