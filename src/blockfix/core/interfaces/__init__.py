"""Core contracts (Protocol) implemented by concrete adapters.

The Core depends on these abstractions; the SQLite store, the httpx
JSON-RPC client and the in-memory test fakes all satisfy them.
"""

from blockfix.core.interfaces.block_store import BlockStore
from blockfix.core.interfaces.upstream import UpstreamClient

__all__ = ["BlockStore", "UpstreamClient"]
