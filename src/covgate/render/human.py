from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

from covgate.model.types import METRICS

if TYPE_CHECKING:
    from covgate.pipeline import CheckOutcome


def _style_percent(pct: float, *, passed: bool | None = None) -> str:
    text = f"{pct:.2f}%"
    if passed is None:
        return text
    return f"[green]{text}[/green]" if passed else f"[red]{text}[/red]"


def _coverage_table(outcome: CheckOutcome) -> Table:
    cov = outcome.coverage
    table = Table(title="Global Coverage", box=box.SIMPLE_HEAVY, header_style="bold")
    table.add_column("Metric")
    table.add_column("Covered", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Cov.", justify="right")
    for m in METRICS:
        counts = cov.totals[m]
        table.add_row(m.value, str(counts.covered), str(counts.total), _style_percent(cov.overall[m]))
    return table


def _verdict_table(outcome: CheckOutcome) -> Table:
    table = Table(title="Thresholds", box=box.SIMPLE_HEAVY, header_style="bold")
    table.add_column("Scope", overflow="fold")
    table.add_column("Metric")
    table.add_column("Actual", justify="right")
    table.add_column("Required", justify="right")
    table.add_column("Status")
    for v in outcome.verdicts:
        table.add_row(
            v.scope,
            v.metric.value,
            _style_percent(v.actual, passed=v.passed),
            f"{v.required:g}%",
            "[green]pass[/green]" if v.passed else "[bold red]FAIL[/bold red]",
        )
    return table


def format_human(outcome: CheckOutcome, *, color: bool = True) -> str:
    """Render coverage totals and verdicts as Rich tables."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=100)
    if outcome.tests is not None:
        console.print(f"Discovered {len(outcome.tests)} test file(s)")
    console.print(f"Collected coverage from {len(outcome.coverage.files)} file(s)")
    console.print(_coverage_table(outcome))
    if outcome.verdicts:
        console.print(_verdict_table(outcome))
    else:
        console.print("No coverage thresholds configured.")
    status = "[green]PASSED[/green]" if outcome.passed else f"[red]FAILED ({len(outcome.result.failures)})[/red]"
    console.print(f"Result: {status}")
    return buf.getvalue().rstrip()


__all__ = ["format_human"]
