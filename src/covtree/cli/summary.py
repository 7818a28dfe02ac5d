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
    parse_levels,
    state_of,
    write_output,
)
from covtree.engine.projections import CoverageTable, overall_statistics
from covtree.render.json import format_json
from covtree.render.table import render_statistics, render_table


def register(app: typer.Typer) -> None:
    @app.command("summary")
    def summary_cmd(
        ctx: typer.Context,
        reports: Annotated[list[Path], typer.Argument(..., help="Cobertura coverage XML report(s).")],
        module: Annotated[
            str,
            typer.Option("--module", help="Module name the reports belong to."),
        ] = DEFAULT_MODULE_NAME,
        levels: Annotated[
            str | None,
            typer.Option("--levels", help="Comma-separated levels shown per file (e.g. line,conditional)."),
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
        by_class: Annotated[bool, typer.Option("--by-class", help="Keep classes as separate nodes.")] = False,
        color: Annotated[bool, typer.Option("--color", help="Force ANSI color output.")] = False,
        no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI color output.")] = False,
    ) -> None:
        """Show overall and per-file coverage of one build."""
        state = state_of(ctx)
        table_levels = parse_levels(levels, state.settings.table_levels)
        result = load_result(state, reports, module=module, by_class=by_class)
        table = CoverageTable.from_tree(result.root, levels=table_levels)

        fmt, color_allowed = compute_io_policy(fmt=output_format, output=output)
        use_color = bool(color or color_allowed) and not no_color
        if fmt == OutputFormat.JSON:
            text = format_json(result, table=table)
        else:
            text = "\n".join([
                render_statistics(overall_statistics(result), color=use_color),
                render_table(table, color=use_color),
            ])
        write_output(text, output)
        raise typer.Exit(code=EXIT_OK)


__all__ = ["register"]
