"""Central configuration and constants for ``covtree``."""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import TYPE_CHECKING

from covtree.errors import ConfigError
from covtree.model.types import CoverageLevel

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("covtree")

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"

# Separator between segments of a flat package name ("com.example.util").
PACKAGE_SEPARATOR = "."

# Name of the synthetic root node that holds every module of a build.
DEFAULT_ROOT_NAME = "project"

# Levels shown per file in the coverage table.
DEFAULT_TABLE_LEVELS: tuple[CoverageLevel, ...] = (CoverageLevel.LINE, CoverageLevel.CONDITIONAL)

# Level whose ratio sizes the treemap chart nodes.
DEFAULT_CHART_METRIC = CoverageLevel.LINE


_SCHEMA_FILES: dict[str, str] = {
    "v1": "schema.json",
}


@cache
def get_schema(version: str = "v1") -> dict[str, object]:
    """Load and cache the JSON schema for structured output."""
    try:
        filename = _SCHEMA_FILES[version]
    except KeyError as exc:
        choices = ", ".join(sorted(_SCHEMA_FILES))
        msg = f"Unsupported schema version: {version!r}. Available versions: {choices}"
        raise ValueError(msg) from exc
    return json.loads(resources.files("covtree.data").joinpath(filename).read_text(encoding="utf-8"))


@dataclass(frozen=True, slots=True)
class Settings:
    """User-tunable options, read from ``[tool.covtree]`` in ``pyproject.toml``."""

    root_name: str = DEFAULT_ROOT_NAME
    package_separator: str = PACKAGE_SEPARATOR
    table_levels: tuple[CoverageLevel, ...] = DEFAULT_TABLE_LEVELS
    chart_metric: CoverageLevel = DEFAULT_CHART_METRIC


def _parse_level(value: object, *, key: str) -> CoverageLevel:
    if not isinstance(value, str):
        msg = f"[tool.covtree] {key} must be a string, got {type(value).__name__}"
        raise ConfigError(msg)
    try:
        return CoverageLevel.parse(value)
    except ValueError as exc:
        msg = f"[tool.covtree] {key}: {exc}"
        raise ConfigError(msg) from exc


def _parse_text(value: object, *, key: str) -> str:
    if not isinstance(value, str) or not value:
        msg = f"[tool.covtree] {key} must be a non-empty string"
        raise ConfigError(msg)
    return value


def settings_from_mapping(table: dict[str, object]) -> Settings:
    """Validate a ``[tool.covtree]`` table and turn it into :class:`Settings`."""
    settings = Settings()
    unknown = sorted(set(table) - {"root-name", "package-separator", "table-levels", "chart-metric"})
    if unknown:
        msg = f"unknown [tool.covtree] option(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    root_name = settings.root_name
    separator = settings.package_separator
    table_levels = settings.table_levels
    chart_metric = settings.chart_metric

    if "root-name" in table:
        root_name = _parse_text(table["root-name"], key="root-name")
    if "package-separator" in table:
        separator = _parse_text(table["package-separator"], key="package-separator")
    if "table-levels" in table:
        raw = table["table-levels"]
        if not isinstance(raw, list) or not raw:
            msg = "[tool.covtree] table-levels must be a non-empty list of level names"
            raise ConfigError(msg)
        table_levels = tuple(_parse_level(item, key="table-levels") for item in raw)
    if "chart-metric" in table:
        chart_metric = _parse_level(table["chart-metric"], key="chart-metric")

    return Settings(
        root_name=root_name,
        package_separator=separator,
        table_levels=table_levels,
        chart_metric=chart_metric,
    )


def load_settings(pyproject: Path | None) -> Settings:
    """Read settings from *pyproject*; fall back to defaults when it is missing or unreadable."""
    if pyproject is None or not pyproject.exists():
        return Settings()
    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse %s: %s", pyproject, e)
        return Settings()

    tool = data.get("tool", {})
    if not isinstance(tool, dict):
        msg = "[tool] must be a table"
        raise ConfigError(msg)
    table = tool.get("covtree", {})
    if not isinstance(table, dict):
        msg = "[tool.covtree] must be a table"
        raise ConfigError(msg)
    if table:
        logger.debug("using covtree settings from %s", pyproject)
    return settings_from_mapping(table)


__all__ = [
    "DEFAULT_CHART_METRIC",
    "DEFAULT_ROOT_NAME",
    "DEFAULT_TABLE_LEVELS",
    "LOG_FORMAT",
    "PACKAGE_SEPARATOR",
    "Settings",
    "get_schema",
    "load_settings",
    "settings_from_mapping",
]
