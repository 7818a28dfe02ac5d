"""Helpers shared by the CLI commands: runtime setup, input loading, output routing."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import click.utils as click_utils
import typer

from covtree import logger
from covtree.adapters.cobertura import iter_facts
from covtree.config import LOG_FORMAT, Settings, load_settings
from covtree.engine.builder import build_tree
from covtree.errors import ConfigError, InvalidReportError, ReportNotFoundError
from covtree.model.types import CoverageLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covtree.model.result import CoverageResult

# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_GENERIC = 1  # Generic failure (fallback)
EXIT_REGRESSION = 2  # Coverage dropped and --fail-on-regression was given
EXIT_DATAERR = 65  # Input data was invalid (e.g., malformed XML)
EXIT_NOINPUT = 66  # Input file not found (e.g., coverage.xml missing)
EXIT_CONFIG = 78  # Invalid configuration (e.g., bad pyproject.toml)


class OutputFormat(StrEnum):
    AUTO = "auto"
    HUMAN = "human"
    JSON = "json"


@dataclass(slots=True)
class CliState:
    """Global options collected by the root callback."""

    debug: bool = False
    quiet: bool = False
    verbose: bool = False
    config: Path | None = None
    settings: Settings = field(default_factory=Settings)


def configure_runtime(*, quiet: bool, verbose: bool, debug: bool) -> None:
    """Configure logging based on *quiet*/*verbose*."""
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if debug:
        logger.debug("debug mode active")


def state_of(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if isinstance(state, CliState):
        return state
    return CliState()


def load_settings_or_exit(config: Path | None) -> Settings:
    try:
        return load_settings(config)
    except ConfigError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=EXIT_CONFIG) from exc


def parse_levels(text: str | None, default: tuple[CoverageLevel, ...]) -> tuple[CoverageLevel, ...]:
    if not text:
        return default
    try:
        return tuple(CoverageLevel.parse(part) for part in text.split(",") if part.strip())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def parse_level(text: str | None, default: CoverageLevel) -> CoverageLevel:
    if not text:
        return default
    try:
        return CoverageLevel.parse(text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def load_result(
    state: CliState,
    reports: Sequence[Path],
    *,
    module: str,
    by_class: bool = False,
    owner: object = None,
) -> CoverageResult:
    """Build a coverage result from Cobertura reports, mapping failures to exit codes."""
    try:
        return build_tree(
            iter_facts(reports, module=module, by_class=by_class),
            owner=owner,
            root_name=state.settings.root_name,
        )
    except ReportNotFoundError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        if state.debug:
            raise
        raise typer.Exit(code=EXIT_NOINPUT) from exc
    except InvalidReportError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        if state.debug:
            raise
        raise typer.Exit(code=EXIT_DATAERR) from exc
    except OSError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        if state.debug:
            raise
        raise typer.Exit(code=EXIT_NOINPUT) from exc


def compute_io_policy(*, fmt: OutputFormat, output: Path | None) -> tuple[OutputFormat, bool]:
    """Return (resolved format, color_allowed)."""
    allow_tty_output = output in {None, Path("-")}
    stdout = sys.stdout
    stdout_is_tty = allow_tty_output and bool(getattr(stdout, "isatty", lambda: False)())
    ansi_allowed = not click_utils.should_strip_ansi(stdout)

    resolved = fmt
    if fmt == OutputFormat.AUTO:
        resolved = OutputFormat.HUMAN if stdout_is_tty else OutputFormat.JSON
    color_allowed = bool(resolved == OutputFormat.HUMAN and stdout_is_tty and ansi_allowed)
    return resolved, color_allowed


def write_output(text: str, destination: Path | None) -> None:
    """Write output to stdout or a file (PATH or '-' for stdout)."""
    if destination is None or destination == Path("-"):
        typer.echo(text)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text + "\n", encoding="utf-8")


__all__ = [
    "EXIT_CONFIG",
    "EXIT_DATAERR",
    "EXIT_GENERIC",
    "EXIT_NOINPUT",
    "EXIT_OK",
    "EXIT_REGRESSION",
    "CliState",
    "OutputFormat",
    "compute_io_policy",
    "configure_runtime",
    "load_result",
    "load_settings_or_exit",
    "parse_level",
    "parse_levels",
    "state_of",
    "write_output",
]
