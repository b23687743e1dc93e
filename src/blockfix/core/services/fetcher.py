"""Canonical block retrieval from the JSON-RPC provider.

Fetches run concurrently under a semaphore; `asyncio.gather` keeps the
results in request order, which the diff step relies on for pairing.
The first failure cancels the fetches still in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from blockfix.core.domain.models import BlockHash, CanonicalBlock
from blockfix.core.errors import UpstreamError
from blockfix.core.interfaces.upstream import UpstreamClient

logger = logging.getLogger(__name__)


async def fetch_canonical_block(upstream: UpstreamClient, block_hash: BlockHash) -> CanonicalBlock:
    try:
        block = await upstream.fetch_block_by_hash(block_hash)
    except UpstreamError:
        raise
    except Exception as exc:
        raise UpstreamError(f"Failed to fetch block {block_hash}: {exc}") from exc

    if block is None:
        raise UpstreamError(f"JSON-RPC provider found no block with hash {block_hash}")
    if block.hash != block_hash:
        raise UpstreamError(
            f"Provider responded with a different block hash: requested {block_hash}, got {block.hash}"
        )
    return block


def validate_batch(requested: Sequence[BlockHash], fetched: Sequence[CanonicalBlock]) -> None:
    """Check that `fetched` lines up one-to-one with `requested`."""

    if len(fetched) != len(requested):
        raise UpstreamError(
            f"Expected {len(requested)} blocks from the provider but received {len(fetched)}"
        )
    for block_hash, block in zip(requested, fetched):
        if block.hash != block_hash:
            raise UpstreamError(
                f"Provider batch out of order: expected {block_hash}, got {block.hash}"
            )


async def fetch_canonical_blocks(
    upstream: UpstreamClient,
    hashes: Sequence[BlockHash],
    *,
    max_concurrency: int = 8,
) -> list[CanonicalBlock]:
    sem = asyncio.Semaphore(max(1, max_concurrency))

    async def fetch_one(block_hash: BlockHash) -> CanonicalBlock:
        async with sem:
            logger.debug("Fetching block %s", block_hash)
            return await fetch_canonical_block(upstream, block_hash)

    tasks = [asyncio.ensure_future(fetch_one(h)) for h in hashes]
    try:
        fetched = await asyncio.gather(*tasks)
    except BaseException:
        # The first failure fails the batch; siblings must not outlive the client.
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    validate_batch(hashes, fetched)
    return list(fetched)
