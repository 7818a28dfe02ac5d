from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Annotated

import typer

from covtree.adapters.cobertura import DEFAULT_MODULE_NAME
from covtree.cli._shared import (
    EXIT_OK,
    OutputFormat,
    compute_io_policy,
    load_result,
    parse_level,
    state_of,
    write_output,
)
from covtree.engine.projections import to_chart_tree
from covtree.engine.split import split_packages
from covtree.render.json import format_json
from covtree.render.tree import render_chart_tree


def register(app: typer.Typer) -> None:
    @app.command("tree")
    def tree_cmd(
        ctx: typer.Context,
        reports: Annotated[list[Path], typer.Argument(..., help="Cobertura coverage XML report(s).")],
        module: Annotated[
            str,
            typer.Option("--module", help="Module name the reports belong to."),
        ] = DEFAULT_MODULE_NAME,
        metric: Annotated[
            str | None,
            typer.Option("--metric", help="Level whose ratio sizes the nodes (default: line)."),
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
        split: Annotated[
            bool,
            typer.Option("--split/--no-split", help="Nest dotted package names one segment per node."),
        ] = True,
        color: Annotated[bool, typer.Option("--color", help="Force ANSI color output.")] = False,
        no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI color output.")] = False,
    ) -> None:
        """Show the coverage treemap of one build."""
        state = state_of(ctx)
        chart_metric = parse_level(metric, state.settings.chart_metric)
        result = load_result(state, reports, module=module)

        root = result.root
        if split:
            root = split_packages(root, separator=state.settings.package_separator)
        chart = to_chart_tree(root, metric=chart_metric)

        fmt, color_allowed = compute_io_policy(fmt=output_format, output=output)
        use_color = bool(color or color_allowed) and not no_color
        if fmt == OutputFormat.JSON:
            text = format_json(result, chart=chart)
        else:
            text = render_chart_tree(chart, color=use_color)
        write_output(text, output)
        raise typer.Exit(code=EXIT_OK)


__all__ = ["register"]
