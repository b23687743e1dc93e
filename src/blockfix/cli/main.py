"""blockfix CLI entry point.

Commands:
- `by-hash`, `by-number`, `by-range`: compare cached blocks with the
  provider and evict the divergent ones.
- `truncate`: delete the whole block cache of the chain.
- `doctor`: diagnostics and user configuration.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from blockfix.adapters.json_exporter import export_check_json
from blockfix.cli import doctor
from blockfix.cli.state import CliState
from blockfix.cli.ui_components import build_divergence_panel, build_summary_table, print_banner
from blockfix.core.domain.models import CachedBlock, CheckResult, DivergenceReport
from blockfix.core.errors import BlockFixError
from blockfix.core.interfaces.block_store import BlockStore
from blockfix.core.services import remediation
from blockfix.core.services.block_check import CheckHooks, check_blocks
from blockfix.core.services.selector import (
    parse_block_number,
    resolve_by_hash,
    resolve_by_number,
    resolve_by_range,
)

app = typer.Typer(
    no_args_is_help=True,
    help="Check cached chain blocks against a JSON-RPC provider and evict divergent ones.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

_REPORT_HELP = "Also write the comparison results to this JSON file."


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _fail(exc: BlockFixError) -> NoReturn:
    _err_console.print(Text.assemble(("Error: ", "bold red"), str(exc)))
    raise typer.Exit(code=1)


def _state(ctx: typer.Context) -> CliState:
    return ctx.ensure_object(CliState)


@app.callback()
def main(
    ctx: typer.Context,
    chain: str | None = typer.Option(None, "--chain", "-c", help="Chain whose block cache is checked."),
    rpc_url: str | None = typer.Option(None, "--rpc-url", help="JSON-RPC provider URL."),
    store_path: Path | None = typer.Option(None, "--store-path", help="SQLite block cache path."),
    concurrency: int | None = typer.Option(
        None,
        "--concurrency",
        min=1,
        help="Maximum concurrent requests to the provider.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Resolve settings: command-line options override environment and .env values."""

    _configure_logging(verbose)
    state = _state(ctx)
    overrides = {
        "chain": chain,
        "rpc_url": rpc_url,
        "store_path": store_path,
        "fetch_max_concurrency": concurrency,
    }
    settings = state.require_settings()
    state.settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


async def _check(state: CliState, store: BlockStore, cached: list[CachedBlock]) -> CheckResult:
    settings = state.require_settings()

    def on_fetch_start(count: int) -> None:
        _console.print(f"Fetching {count} block(s) from the provider...", style="dim")

    def on_divergence(report: DivergenceReport) -> None:
        _console.print(build_divergence_panel(report))

    async with state.upstream_factory(settings) as upstream:
        return await check_blocks(
            cached_blocks=cached,
            upstream=upstream,
            store=store,
            max_concurrency=settings.fetch_max_concurrency,
            hooks=CheckHooks(fetch_start=on_fetch_start, divergence=on_divergence),
        )


def _run_check(
    ctx: typer.Context,
    selector: str,
    resolve: Callable[[BlockStore], list[CachedBlock]],
    report_path: Path | None,
) -> None:
    state = _state(ctx)
    settings = state.require_settings()
    print_banner(_console, chain=settings.chain, rpc_url=settings.rpc_url)

    try:
        with state.store_factory(settings) as store:
            cached = resolve(store)
            logger.debug("Selector %s resolved to %d cached blocks", selector, len(cached))
            result = asyncio.run(_check(state, store, cached))
    except BlockFixError as exc:
        _fail(exc)

    _console.print(build_summary_table(result))
    if result.deleted:
        _console.print(f"[red]Deleted {len(result.deleted)} divergent block(s) from the cache.[/red]")
    else:
        _console.print(f"[green]No divergence found in {result.checked} block(s).[/green]")

    if report_path:
        path = export_check_json(
            result=result,
            chain=settings.chain,
            selector=selector,
            output_path=report_path,
        )
        _console.print(f"Report written to {path}", style="dim")


@app.command("by-hash")
def by_hash(
    ctx: typer.Context,
    block_hash: str = typer.Argument(..., metavar="HASH", help="Block hash (hex, 0x optional)."),
    report: Path | None = typer.Option(None, "--report", help=_REPORT_HELP),
) -> None:
    """Check the cached block with this hash."""

    _run_check(ctx, f"hash {block_hash}", lambda store: resolve_by_hash(store, block_hash), report)


@app.command("by-number")
def by_number(
    ctx: typer.Context,
    number: str = typer.Argument(..., metavar="N", help="Block number."),
    report: Path | None = typer.Option(None, "--report", help=_REPORT_HELP),
) -> None:
    """Check the cached block with this number (fails if the number is ambiguous)."""

    try:
        block_number = parse_block_number(number)
    except BlockFixError as exc:
        _fail(exc)
    _run_check(
        ctx,
        f"number {block_number}",
        lambda store: resolve_by_number(store, block_number),
        report,
    )


@app.command("by-range")
def by_range(
    ctx: typer.Context,
    block_range: str = typer.Argument(
        ...,
        metavar="RANGE",
        help="A..B, A..=B, A.., ..B, ..=B or .. (open ends reach the chain head).",
    ),
    report: Path | None = typer.Option(None, "--report", help=_REPORT_HELP),
) -> None:
    """Check every cached block in a range of block numbers."""

    _run_check(ctx, f"range {block_range}", lambda store: resolve_by_range(store, block_range), report)


@app.command()
def truncate(
    ctx: typer.Context,
    skip_confirmation: bool = typer.Option(
        False,
        "--skip-confirmation",
        "-y",
        help="Do not ask before deleting.",
    ),
) -> None:
    """Delete every cached block of the chain."""

    settings = _state(ctx).require_settings()

    def confirm() -> bool:
        _console.print(f"This will delete all cached blocks for chain {settings.chain}.")
        try:
            answer = typer.prompt("Proceed? [y/N]", default="", show_default=False)
        except typer.Abort:
            # Closed stdin reads as an empty answer.
            answer = ""
        return remediation.is_affirmative(answer)

    try:
        with _state(ctx).store_factory(settings) as store:
            done = remediation.truncate(
                store,
                skip_confirmation=skip_confirmation,
                confirm=confirm,
                notify=_console.print,
            )
    except BlockFixError as exc:
        _fail(exc)

    if done:
        _console.print(f"[green]Block cache for {settings.chain} truncated.[/green]")


def run() -> None:
    app()
