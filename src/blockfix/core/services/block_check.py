"""Check pipeline: fetch canonical blocks, diff them, evict divergent ones.

Why a service:
- The CLI and the tests drive one fetch-then-evict sequence.
- Side effects on the terminal (panels, progress) stay in the CLI; the
  pipeline only calls the optional hooks.

Note: nothing is deleted unless every fetch and comparison succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from blockfix.core.domain.models import CachedBlock, CheckResult, DivergenceReport
from blockfix.core.interfaces.block_store import BlockStore
from blockfix.core.interfaces.upstream import UpstreamClient
from blockfix.core.services.divergence import compare_blocks
from blockfix.core.services.fetcher import fetch_canonical_blocks
from blockfix.core.services.remediation import remediate

logger = logging.getLogger(__name__)


@dataclass
class CheckHooks:
    """Optional callbacks for UI layers."""

    fetch_start: Callable[[int], None] | None = None
    divergence: Callable[[DivergenceReport], None] | None = None


async def check_blocks(
    *,
    cached_blocks: Sequence[CachedBlock],
    upstream: UpstreamClient,
    store: BlockStore,
    max_concurrency: int = 8,
    hooks: CheckHooks | None = None,
) -> CheckResult:
    hooks = hooks or CheckHooks()

    if hooks.fetch_start:
        hooks.fetch_start(len(cached_blocks))
    hashes = [block.hash for block in cached_blocks]
    canonical_blocks = await fetch_canonical_blocks(
        upstream,
        hashes,
        max_concurrency=max_concurrency,
    )

    reports = compare_blocks(cached_blocks, canonical_blocks)
    deleted = remediate(store, reports, display=hooks.divergence)
    logger.info(
        "Checked %d blocks: %d divergent, %d deleted",
        len(reports),
        sum(1 for r in reports if r.diverged),
        len(deleted),
    )
    return CheckResult(checked=len(reports), reports=reports, deleted=deleted)
