"""Per-invocation CLI state shared by the root app and the doctor sub-app.

Holds the effective settings and the factories that build the block
store and the JSON-RPC client; tests swap the factories for fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncContextManager, Callable, ContextManager

from blockfix.adapters.rpc_client import JsonRpcUpstreamClient
from blockfix.adapters.sqlite_store import SQLiteBlockStore
from blockfix.core.config import AppSettings
from blockfix.core.interfaces.block_store import BlockStore
from blockfix.core.interfaces.upstream import UpstreamClient


def open_sqlite_store(settings: AppSettings) -> ContextManager[BlockStore]:
    return SQLiteBlockStore(settings.store_path, settings.chain)


def open_rpc_client(settings: AppSettings) -> AsyncContextManager[UpstreamClient]:
    return JsonRpcUpstreamClient(settings)


@dataclass
class CliState:
    settings: AppSettings | None = None
    store_factory: Callable[[AppSettings], ContextManager[BlockStore]] = open_sqlite_store
    upstream_factory: Callable[[AppSettings], AsyncContextManager[UpstreamClient]] = open_rpc_client

    def require_settings(self) -> AppSettings:
        if self.settings is None:
            self.settings = AppSettings()
        return self.settings
