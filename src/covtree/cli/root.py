from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from typer.main import get_command

from covtree import __version__
from covtree.cli import diff, summary, tree
from covtree.cli._shared import CliState, configure_runtime, load_settings_or_exit


def _print_version(value: bool) -> None:  # noqa: FBT001
    if value:
        typer.echo(f"covtree {__version__}")
        raise typer.Exit


def create_app() -> typer.Typer:
    app = typer.Typer(help="Roll up, restructure and compare code coverage trees.")

    @app.callback()
    def _root(
        ctx: typer.Context,
        config: Annotated[
            Path,
            typer.Option("--config", help="pyproject.toml holding a [tool.covtree] table."),
        ] = Path("pyproject.toml"),
        *,
        version: Annotated[  # noqa: ARG001
            bool,
            typer.Option("--version", callback=_print_version, is_eager=True, help="Show version and exit"),
        ] = False,
        debug: Annotated[bool, typer.Option("--debug", help="Show full tracebacks for errors")] = False,
        quiet: Annotated[bool, typer.Option("-q", "--quiet", help="Suppress INFO logs, emit only errors")] = False,
        verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Emit diagnostic logging")] = False,
    ) -> None:
        configure_runtime(quiet=quiet, verbose=verbose, debug=debug)
        ctx.obj = CliState(
            debug=debug,
            quiet=quiet,
            verbose=verbose,
            config=config,
            settings=load_settings_or_exit(config),
        )

    summary.register(app)
    tree.register(app)
    diff.register(app)

    return app


def main() -> None:
    app = create_app()
    get_command(app)()


# Click-compatible object for tooling that imports it
cli = get_command(create_app())

__all__ = ["cli", "create_app", "main"]
