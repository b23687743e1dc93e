"""Rich UI components for the CLI.

Why separate components:
- Command logic stays free of layout details.
- `by-hash`, `by-number` and `by-range` share the same panels and summary table.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from blockfix.core.domain.models import CheckResult, DivergenceReport

_DIFF_STYLES = {"+": "green", "-": "red", "~": "yellow"}


def print_banner(console: Console, *, chain: str, rpc_url: str) -> None:
    """Print the run header (chain and provider being compared)."""

    title = Text("blockfix", style="bold cyan")
    subtitle = Text(f"chain {chain} • provider {rpc_url}", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(0, 2)))


def build_divergence_panel(report: DivergenceReport) -> Panel:
    """Panel showing a divergent block and its diff (cached -> provider)."""

    body = Text()
    for line in (report.diff or "").splitlines():
        body.append(line + "\n", style=_DIFF_STYLES.get(line[:1], "white"))
    title = Text(f"Block {report.hash} diverges", style="bold red")
    return Panel(body, title=title, subtitle="cached → provider", border_style="red")


def build_summary_table(result: CheckResult) -> Table:
    table = Table(title="Block check")
    table.add_column("Block hash", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")

    deleted = set(result.deleted)
    for report in result.reports:
        if not report.diverged:
            status = Text("OK", style="green")
        elif report.hash in deleted:
            status = Text("DIVERGED, deleted", style="red")
        else:
            status = Text("DIVERGED", style="red")
        table.add_row(str(report.hash), status)
    return table
