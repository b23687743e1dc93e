"""Structural comparison of cached and canonical block documents.

Both sides are first normalized into plain JSON-like trees (dict, list,
str, int, float, bool, None). Map key order is not significant, array
order is. A diff is only computed when the trees differ, and a diff that
comes back empty counts as equality.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Literal, Sequence

from pydantic import BaseModel

from blockfix.core.domain.models import CachedBlock, CanonicalBlock, DivergenceReport
from blockfix.core.errors import UpstreamError

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class DiffEntry:
    op: Literal["add", "remove", "change"]
    path: str
    old: Any = None
    new: Any = None


Differ = Callable[[Any, Any], Sequence[DiffEntry]]


def normalize_document(value: Any) -> Any:
    """Convert `value` into a plain JSON-like tree."""

    if isinstance(value, BaseModel):
        return normalize_document(value.model_dump(mode="json"))
    if isinstance(value, Mapping):
        return {str(key): normalize_document(item) for key, item in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [normalize_document(item) for item in value]
    return value


def documents_equal(left: Any, right: Any) -> bool:
    """Structural equality of two normalized documents."""

    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(documents_equal(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(documents_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return False
    # True == 1 in Python, but not in JSON.
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _pointer(parts: Sequence[str]) -> str:
    if not parts:
        return "/"
    escaped = [part.replace("~", "~0").replace("/", "~1") for part in parts]
    return "/" + "/".join(escaped)


def _diff_into(left: Any, right: Any, path: tuple[str, ...], out: list[DiffEntry]) -> None:
    if documents_equal(left, right):
        return

    if isinstance(left, dict) and isinstance(right, dict):
        for key, value in left.items():
            child = path + (key,)
            other = right.get(key, _MISSING)
            if other is _MISSING:
                out.append(DiffEntry(op="remove", path=_pointer(child), old=value))
            else:
                _diff_into(value, other, child, out)
        for key, value in right.items():
            if key not in left:
                out.append(DiffEntry(op="add", path=_pointer(path + (key,)), new=value))
        return

    if isinstance(left, list) and isinstance(right, list):
        for idx in range(max(len(left), len(right))):
            child = path + (str(idx),)
            if idx >= len(right):
                out.append(DiffEntry(op="remove", path=_pointer(child), old=left[idx]))
            elif idx >= len(left):
                out.append(DiffEntry(op="add", path=_pointer(child), new=right[idx]))
            else:
                _diff_into(left[idx], right[idx], child, out)
        return

    out.append(DiffEntry(op="change", path=_pointer(path), old=left, new=right))


def diff_documents(left: Any, right: Any) -> list[DiffEntry]:
    """List the added, removed and changed keys/positions from `left` to `right`."""

    entries: list[DiffEntry] = []
    _diff_into(left, right, (), entries)
    return entries


def _value(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def render_diff(entries: Sequence[DiffEntry]) -> str:
    """Render entries as `+`, `-` and `~` lines, one per entry."""

    lines: list[str] = []
    for entry in entries:
        if entry.op == "add":
            lines.append(f"+ {entry.path}: {_value(entry.new)}")
        elif entry.op == "remove":
            lines.append(f"- {entry.path}: {_value(entry.old)}")
        else:
            lines.append(f"~ {entry.path}: {_value(entry.old)} -> {_value(entry.new)}")
    return "\n".join(lines)


def compare_pair(cached: Any, canonical: Any, *, differ: Differ = diff_documents) -> str | None:
    """Return the rendered diff from `cached` to `canonical`, or None if equal."""

    left = normalize_document(cached)
    right = normalize_document(canonical)
    if documents_equal(left, right):
        return None

    entries = differ(left, right)
    if not entries:
        logger.debug("Documents differ in representation only; treating them as equal")
        return None
    return render_diff(entries) or None


def compare_blocks(
    cached_blocks: Sequence[CachedBlock],
    canonical_blocks: Sequence[CanonicalBlock],
    *,
    differ: Differ = diff_documents,
) -> list[DivergenceReport]:
    """Compare positionally aligned cached/canonical blocks, one report per pair."""

    if len(cached_blocks) != len(canonical_blocks):
        raise UpstreamError(
            f"Cannot pair {len(cached_blocks)} cached blocks with {len(canonical_blocks)} canonical blocks"
        )

    reports: list[DivergenceReport] = []
    for cached, canonical in zip(cached_blocks, canonical_blocks):
        if cached.hash != canonical.hash:
            raise UpstreamError(f"Cannot compare cached block {cached.hash} with block {canonical.hash}")
        diff = compare_pair(cached.payload, canonical.payload, differ=differ)
        if diff is not None:
            logger.info("Block %s diverges from the provider", cached.hash)
        reports.append(DivergenceReport(hash=cached.hash, diff=diff))
    return reports
