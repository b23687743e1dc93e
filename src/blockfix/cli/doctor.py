"""Doctor commands: environment diagnostics and user configuration."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from blockfix.cli.state import CliState
from blockfix.core.config import AppSettings, write_user_env_vars
from blockfix.core.errors import BlockFixError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_rpc(state: CliState, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with state.upstream_factory(settings) as client:
            chain_id = getattr(client, "chain_id", None)
            block_number = getattr(client, "block_number", None)
            if chain_id is None or block_number is None:
                return True, "connected"
            return True, f"chainId {await chain_id()}, head #{await block_number()}"
    except BlockFixError as exc:
        return False, str(exc)


def _check_store(state: CliState, settings: AppSettings) -> list[tuple[str, bool, str]]:
    try:
        with state.store_factory(settings) as store:
            head = store.chain_head_number()
            count_blocks = getattr(store, "count_blocks", None)
            count = count_blocks() if count_blocks else None
    except BlockFixError as exc:
        return [("Block store", False, str(exc))]

    rows = [("Block store", True, str(settings.store_path))]
    if count is not None:
        rows.append(("Cached blocks", True, str(count)))
    if head is None:
        rows.append(("Chain head", False, f"No chain head recorded for {settings.chain}"))
    else:
        rows.append(("Chain head", True, f"#{head}"))
    return rows


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics for the block store and the provider."""

    state = ctx.ensure_object(CliState)
    settings = state.require_settings()

    table = Table(title="blockfix doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Chain", "OK", settings.chain)
    table.add_row("Fetch concurrency", "OK", str(settings.fetch_max_concurrency))

    for check, ok, detail in _check_store(state, settings):
        table.add_row(check, "OK" if ok else "FAIL", detail)

    ok_rpc, detail_rpc = asyncio.run(_check_rpc(state, settings))
    table.add_row("JSON-RPC provider", "OK" if ok_rpc else "FAIL", detail_rpc)

    _console.print(table)

    if not ok_rpc:
        _console.print(
            "\n[yellow]Note:[/yellow] set BLOCKFIX_RPC_URL or run `blockfix doctor setup` "
            "to point at a reachable provider."
        )


@app.command()
def setup(ctx: typer.Context) -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = ctx.ensure_object(CliState).require_settings()

    rpc_url = typer.prompt("JSON-RPC provider URL", default=settings.rpc_url, show_default=True).strip()
    store_path = typer.prompt("Block cache path", default=str(settings.store_path), show_default=True).strip()
    chain = typer.prompt("Chain name", default=settings.chain, show_default=True).strip()

    if not rpc_url or not store_path or not chain:
        raise typer.BadParameter("rpc_url, store_path and chain are required")

    env_path = write_user_env_vars(
        {
            "BLOCKFIX_RPC_URL": rpc_url,
            "BLOCKFIX_STORE_PATH": store_path,
            "BLOCKFIX_CHAIN": chain,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
