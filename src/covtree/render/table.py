from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covtree.engine.delta import TreeDiff
    from covtree.engine.projections import CoverageStatistics, CoverageTable
    from covtree.model.ratio import Ratio


def _style_percent(ratio: Ratio | None, green: float, yellow: float) -> str:
    pct = None if ratio is None else ratio.percentage
    if pct is None:
        return "n/a"
    v = round(pct)
    if v >= green:
        return f"[green]{v}%[/green]"
    if v >= yellow:
        return f"[yellow]{v}%[/yellow]"
    return f"[red]{v}%[/red]"


def _style_delta(delta: int | None) -> str:
    if delta is None:
        return "n/a"
    if delta > 0:
        return f"[green]+{delta}[/green]"
    if delta < 0:
        return f"[red]{delta}[/red]"
    return "0"


def _print(table: Table, *, color: bool) -> str:
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=120)
    console.print()
    console.print(table)
    console.print()
    return buf.getvalue().rstrip()


def render_table(
    table: CoverageTable,
    *,
    color: bool = True,
    green: float = 90.0,
    yellow: float = 75.0,
) -> str:
    """Render the per-file coverage table with Rich."""
    out = Table(title="Coverage Details", box=box.SIMPLE_HEAVY, header_style="bold", expand=True)
    for header, key in table.columns():
        if key in {"package_name", "file_name"}:
            out.add_column(header, overflow="fold")
        else:
            out.add_column(header, justify="right")

    for row in table.rows:
        out.add_row(
            row.package_name,
            row.file_name,
            *(_style_percent(row.coverage(level), green, yellow) for level in table.levels),
        )
    return _print(out, color=color)


def render_statistics(
    statistics: Sequence[CoverageStatistics],
    *,
    color: bool = True,
    show_delta: bool = False,
    green: float = 90.0,
    yellow: float = 75.0,
) -> str:
    """Render the whole-tree ratio of each level (finest level first)."""
    out = Table(title="Coverage Summary", box=box.SIMPLE_HEAVY, header_style="bold")
    out.add_column("Level")
    out.add_column("Covered", justify="right")
    out.add_column("Total", justify="right")
    out.add_column("Cov.", justify="right")
    if show_delta:
        out.add_column("Delta", justify="right")

    for stat in statistics:
        row = [
            stat.name,
            str(stat.ratio.covered),
            str(stat.ratio.total),
            _style_percent(stat.ratio, green, yellow),
        ]
        if show_delta:
            row.append(_style_delta(stat.delta))
        out.add_row(*row)
    return _print(out, color=color)


def render_tree_diff(diff: TreeDiff, *, color: bool = True) -> str:
    """Render per-node deltas plus added/removed nodes."""
    levels = sorted({level for deltas in diff.matched.values() for level in deltas}, reverse=True)
    out = Table(title=f"Changes per {diff.level.value}", box=box.SIMPLE_HEAVY, header_style="bold", expand=True)
    out.add_column(diff.level.display_name, overflow="fold")
    out.add_column("Status")
    for level in levels:
        out.add_column(level.display_name, justify="right")

    for name, deltas in diff.matched.items():
        out.add_row(name, "changed" if any(deltas.values()) else "", *(_style_delta(deltas.get(level)) for level in levels))
    for name in diff.added:
        out.add_row(name, "[cyan]added[/cyan]", *("" for _ in levels))
    for name in diff.removed:
        out.add_row(name, "[magenta]removed[/magenta]", *("" for _ in levels))
    return _print(out, color=color)


__all__ = ["render_statistics", "render_table", "render_tree_diff"]
