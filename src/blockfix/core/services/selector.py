"""Selector resolution: hash, number or range text to cached blocks.

Each helper returns the cached blocks to inspect, in ascending block
order. A single unresolved identifier aborts the whole selection.
"""

from __future__ import annotations

import logging

from blockfix.core.domain.block_range import BlockRange
from blockfix.core.domain.cardinality import expect_single
from blockfix.core.domain.models import BlockHash, CachedBlock
from blockfix.core.errors import InputParseError, ResolutionError
from blockfix.core.interfaces.block_store import BlockStore

logger = logging.getLogger(__name__)


def parse_block_number(text: str) -> int:
    try:
        number = int(text.strip(), 10)
    except ValueError:
        raise InputParseError(f"Cannot parse a block number from `{text}`") from None
    if number < 0:
        raise InputParseError(f"Invalid block number {number}: negative block number")
    return number


def read_cached_block(store: BlockStore, block_hash: BlockHash) -> CachedBlock:
    """Read the single cached document stored under `block_hash`."""

    payloads = store.lookup_by_hash(block_hash)
    payload = expect_single(f"cached block with hash {block_hash}", payloads)
    return CachedBlock(hash=block_hash, payload=payload)


def resolve_by_hash(store: BlockStore, text: str) -> list[CachedBlock]:
    block_hash = BlockHash.from_hex(text)
    return [read_cached_block(store, block_hash)]


def _hash_for_number(store: BlockStore, number: int) -> BlockHash:
    hashes = store.lookup_hashes_by_number(number)
    return expect_single(
        f"block hash for block number {number}",
        hashes,
        hint="Pick one of them and run the check by hash instead.",
    )


def resolve_by_number(store: BlockStore, number: int) -> list[CachedBlock]:
    if number < 0:
        raise InputParseError(f"Invalid block number {number}: negative block number")
    block_hash = _hash_for_number(store, number)
    return [read_cached_block(store, block_hash)]


def resolve_by_range(store: BlockStore, text: str) -> list[CachedBlock]:
    block_range = BlockRange.parse(text)

    chain_head = None
    if block_range.is_open:
        chain_head = store.chain_head_number()
        if chain_head is None:
            raise ResolutionError(
                f"Cannot resolve range `{text}`: no chain head is recorded for chain {store.chain}"
            )
        logger.debug("Open range %s closed at chain head %d", block_range, chain_head)

    cached: list[CachedBlock] = []
    for number in block_range.numbers(chain_head):
        block_hash = _hash_for_number(store, number)
        cached.append(read_cached_block(store, block_hash))
    logger.info("Resolved range %s to %d cached blocks", block_range, len(cached))
    return cached
