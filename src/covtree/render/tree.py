from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.tree import Tree

if TYPE_CHECKING:
    from covtree.engine.projections import ChartNode


def _label(node: ChartNode, green: float, yellow: float) -> str:
    pct = node.value.percentage
    if pct is None:
        return f"{node.name} [dim]n/a[/dim]"
    v = round(pct)
    style = "green" if v >= green else "yellow" if v >= yellow else "red"
    return f"{node.name} [{style}]{v}%[/{style}] [dim]({node.value})[/dim]"


def _attach(parent: Tree, node: ChartNode, green: float, yellow: float) -> None:
    branch = parent.add(_label(node, green, yellow))
    for child in node.children:
        _attach(branch, child, green, yellow)


def render_chart_tree(
    chart: ChartNode,
    *,
    color: bool = True,
    green: float = 90.0,
    yellow: float = 75.0,
) -> str:
    """Render treemap nodes as an indented Rich tree."""
    root = Tree(_label(chart, green, yellow))
    for child in chart.children:
        _attach(root, child, green, yellow)

    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=120)
    console.print(root)
    return buf.getvalue().rstrip()


__all__ = ["render_chart_tree"]
