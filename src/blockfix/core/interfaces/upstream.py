"""Upstream (JSON-RPC provider) contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from blockfix.core.domain.models import BlockHash, CanonicalBlock


@runtime_checkable
class UpstreamClient(Protocol):
    """Source of truth for block contents.

    `fetch_block_by_hash` is asynchronous because it does network I/O.
    It returns None when the provider knows no such block. Timeouts and
    retries, if any, are the implementation's business.
    """

    async def fetch_block_by_hash(self, block_hash: BlockHash) -> CanonicalBlock | None:
        ...
