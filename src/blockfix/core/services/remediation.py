"""Eviction of divergent blocks and bulk truncation of the block cache."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from blockfix.core.domain.models import BlockHash, DivergenceReport
from blockfix.core.errors import BlockFixError, StoreError
from blockfix.core.interfaces.block_store import BlockStore

logger = logging.getLogger(__name__)

_AFFIRMATIVE = ("y", "yes")


def is_affirmative(answer: str | None) -> bool:
    """`y`/`yes` in any case confirms; anything else, including nothing, declines."""

    if answer is None:
        return False
    return answer.strip().lower() in _AFFIRMATIVE


def _store_call(action: str, fn: Callable[[], None]) -> None:
    try:
        fn()
    except BlockFixError:
        raise
    except Exception as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc


def remediate(
    store: BlockStore,
    reports: Sequence[DivergenceReport],
    *,
    display: Callable[[DivergenceReport], None] | None = None,
) -> list[BlockHash]:
    """Show each divergent block, then delete it from the cache.

    Deletes run one hash at a time, each after its report was displayed.
    Returns the deleted hashes in order.
    """

    deleted: list[BlockHash] = []
    for report in reports:
        if not report.diverged:
            continue
        if display:
            display(report)
        _store_call(
            f"delete cached block {report.hash} for {store.chain}",
            lambda: store.delete([report.hash]),
        )
        logger.info("Deleted cached block %s", report.hash)
        deleted.append(report.hash)
    return deleted


def truncate(
    store: BlockStore,
    *,
    skip_confirmation: bool,
    confirm: Callable[[], bool],
    notify: Callable[[str], None] | None = None,
) -> bool:
    """Delete every cached block of the store's chain once confirmed.

    Returns False, after notifying "Aborting.", when the operator declines.
    """

    if not skip_confirmation and not confirm():
        if notify:
            notify("Aborting.")
        return False

    _store_call(f"truncate block cache for {store.chain}", store.truncate_all)
    logger.info("Truncated block cache for %s", store.chain)
    return True
