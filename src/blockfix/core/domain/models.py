"""Domain models (Pydantic v2).

These models describe *what* a cached or canonical block is, not how it
is read from the store or fetched from the JSON-RPC provider.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_serializer
from pydantic.config import ConfigDict

from blockfix.core.errors import InputParseError

HASH_LENGTH = 32

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


class BlockHash(BaseModel):
    """A 32-byte block hash.

    Rendered as `0x` + lowercase hex; hashable so it can key dicts and sets.
    """

    model_config = ConfigDict(frozen=True)

    value: bytes = Field(
        ...,
        description="Raw hash bytes (exactly 32).",
    )

    @field_validator("value")
    @classmethod
    def _check_length(cls, value: bytes) -> bytes:
        if len(value) != HASH_LENGTH:
            raise ValueError(f"expected {HASH_LENGTH} bytes, got {len(value)}")
        return value

    @classmethod
    def from_hex(cls, text: str) -> "BlockHash":
        """Parse hex text, with or without `0x`, in any case."""

        raw = text.strip()
        digits = raw[2:] if raw[:2] in ("0x", "0X") else raw
        if not digits or not _HEX_RE.match(digits) or len(digits) % 2:
            raise InputParseError(f"Cannot parse a block hash from `{text}`: not valid hex")
        if len(digits) != HASH_LENGTH * 2:
            raise InputParseError(
                f"Cannot parse a block hash from `{text}`: "
                f"expected {HASH_LENGTH} bytes, got {len(digits) // 2}"
            )
        return cls(value=bytes.fromhex(digits))

    def hex(self) -> str:
        return "0x" + self.value.hex()

    def __str__(self) -> str:
        return self.hex()

    @model_serializer
    def _serialize(self) -> str:
        return self.hex()


class CachedBlock(BaseModel):
    """A block document as stored by the block cache."""

    hash: BlockHash = Field(..., description="Hash the cache stores the block under.")
    payload: Any = Field(
        ...,
        description="Cached JSON document (maps, arrays and scalars, key order preserved).",
    )


class CanonicalBlock(BaseModel):
    """A block freshly fetched from the JSON-RPC provider."""

    hash: BlockHash = Field(..., description="Hash the provider reports for the block.")
    payload: Any = Field(..., description="Block document as returned by the provider.")


class DivergenceReport(BaseModel):
    """Outcome of comparing one cached block with its canonical counterpart."""

    hash: BlockHash
    diff: str | None = Field(
        default=None,
        description="Rendered delta; None when both documents are structurally equal.",
    )

    @property
    def diverged(self) -> bool:
        return self.diff is not None


class CheckResult(BaseModel):
    """Output of a check run over a set of cached blocks."""

    checked: int = Field(default=0, ge=0, description="Number of blocks compared.")
    reports: list[DivergenceReport] = Field(default_factory=list)
    deleted: list[BlockHash] = Field(
        default_factory=list,
        description="Hashes evicted from the cache, in deletion order.",
    )

    @property
    def diverged(self) -> list[DivergenceReport]:
        return [report for report in self.reports if report.diverged]
