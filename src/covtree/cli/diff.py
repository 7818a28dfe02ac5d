from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Annotated

import typer

from covtree.adapters.cobertura import DEFAULT_MODULE_NAME
from covtree.cli._shared import (
    EXIT_OK,
    EXIT_REGRESSION,
    OutputFormat,
    compute_io_policy,
    load_result,
    parse_level,
    state_of,
    write_output,
)
from covtree.engine.delta import compute_delta, diff_trees
from covtree.engine.projections import overall_statistics
from covtree.model.types import CoverageLevel
from covtree.render.json import format_json
from covtree.render.table import render_statistics, render_tree_diff


def register(app: typer.Typer) -> None:
    @app.command("diff")
    def diff_cmd(
        ctx: typer.Context,
        reference: Annotated[Path, typer.Argument(..., help="Coverage XML of the reference build.")],
        candidate: Annotated[Path, typer.Argument(..., help="Coverage XML of the candidate build.")],
        module: Annotated[
            str,
            typer.Option("--module", help="Module name both reports belong to."),
        ] = DEFAULT_MODULE_NAME,
        level: Annotated[
            str | None,
            typer.Option("--level", help="Level at which nodes are matched by name (default: file)."),
        ] = None,
        output_format: Annotated[
            OutputFormat,
            typer.Option("--format", help="Output format: auto, human, json."),
        ] = OutputFormat.AUTO,
        output: Annotated[
            Path | None,
            typer.Option("--output", help="Write output to PATH (use '-' for stdout)."),
        ] = None,
        *,
        fail_on_regression: Annotated[
            bool,
            typer.Option("--fail-on-regression", help="Exit with status 2 when any level lost coverage."),
        ] = False,
        color: Annotated[bool, typer.Option("--color", help="Force ANSI color output.")] = False,
        no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI color output.")] = False,
    ) -> None:
        """Compare a candidate build's coverage with its reference build."""
        state = state_of(ctx)
        match_level = parse_level(level, CoverageLevel.FILE)
        reference_result = load_result(state, [reference], module=module, owner=reference)
        candidate_result = load_result(state, [candidate], module=module, owner=candidate)

        delta = compute_delta(candidate_result, reference_result)
        tree_diff = diff_trees(candidate_result.root, reference_result.root, level=match_level)

        fmt, color_allowed = compute_io_policy(fmt=output_format, output=output)
        use_color = bool(color or color_allowed) and not no_color
        if fmt == OutputFormat.JSON:
            text = format_json(candidate_result, diff=tree_diff)
        else:
            text = "\n".join([
                render_statistics(overall_statistics(candidate_result), color=use_color, show_delta=True),
                render_tree_diff(tree_diff, color=use_color),
            ])
        write_output(text, output)

        if fail_on_regression and any(value < 0 for value in delta.values()):
            regressed = ", ".join(f"{lvl.value} {value}" for lvl, value in delta.items() if value < 0)
            typer.echo(f"Coverage regression: {regressed}", err=True)
            raise typer.Exit(code=EXIT_REGRESSION)
        raise typer.Exit(code=EXIT_OK)


__all__ = ["register"]
