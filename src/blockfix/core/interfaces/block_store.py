"""Block cache contract.

A narrow view of the persistent block store: lookups, deletion and
truncation for one configured chain. Implementations wrap backend
failures in `StoreError`.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from blockfix.core.domain.models import BlockHash


@runtime_checkable
class BlockStore(Protocol):
    """Minimal contract for the cached-blocks backend.

    - Hash should be a primary key, so `lookup_by_hash` normally yields at
      most one document; callers still treat several as corruption.
    - Several hashes for one number mean an unresolved fork or a duplicate.
    """

    chain: str

    def lookup_by_hash(self, block_hash: BlockHash) -> list[Any]:
        """Return every cached document stored under `block_hash`."""

        ...

    def lookup_hashes_by_number(self, number: int) -> list[BlockHash]:
        """Return every cached hash recorded for block `number`."""

        ...

    def chain_head_number(self) -> int | None:
        """Return the chain head block number, or None if unknown."""

        ...

    def delete(self, hashes: Sequence[BlockHash]) -> None:
        """Delete the cached rows for `hashes`."""

        ...

    def truncate_all(self) -> None:
        """Delete every cached block of the configured chain."""

        ...
