"""Block number ranges as typed by the operator.

Accepted forms: `A..B`, `A..=B`, `A..`, `..B`, `..=B`, `..` (and `..=`).
`..` excludes the upper bound, `..=` includes it. An open upper bound
always reaches the chain head inclusively, whichever separator was used.
Block numbers are 1-based: a missing or zero lower bound means 1.

Internally the upper bound is kept exclusive: inclusive `N` becomes `N + 1`.
"""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from blockfix.core.errors import InputParseError

FIRST_BLOCK = 1

_INCLUSIVE_SEP = "..="
_EXCLUSIVE_SEP = ".."


class BlockRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    lower: int | None = Field(default=None, description="Lower bound, always inclusive.")
    upper: int | None = Field(default=None, description="Upper bound; None means the chain head.")
    inclusive: bool = Field(default=False, description="Whether `upper` itself is included.")

    @classmethod
    def parse(cls, text: str) -> "BlockRange":
        raw = text.strip()
        if _INCLUSIVE_SEP in raw:
            sep, inclusive = _INCLUSIVE_SEP, True
        elif _EXCLUSIVE_SEP in raw:
            sep, inclusive = _EXCLUSIVE_SEP, False
        else:
            raise InputParseError(f"Invalid range `{text}`: expected `..` or `..=` separator")

        lower_text, upper_text = raw.split(sep, 1)
        lower = _parse_bound(lower_text, text)
        upper = _parse_bound(upper_text, text)

        if lower is not None and lower < 0:
            raise InputParseError(f"Invalid range `{text}`: negative block number {lower}")
        if upper is not None and upper < 0:
            raise InputParseError(f"Invalid range `{text}`: negative block number {upper}")
        if lower is not None and upper is not None and lower > upper:
            raise InputParseError(f"Invalid range `{text}`: {lower} is greater than {upper}")

        if upper is None:
            # Nothing to exclude above an open bound.
            inclusive = True
        return cls(lower=lower, upper=upper, inclusive=inclusive)

    @property
    def is_open(self) -> bool:
        return self.upper is None

    def min_max(self) -> tuple[int, int | None]:
        """Return `(min, max_exclusive)`; `max_exclusive` is None when open."""

        low = max(self.lower or FIRST_BLOCK, FIRST_BLOCK)
        if self.upper is None:
            return low, None
        high = self.upper + 1 if self.inclusive else self.upper
        return low, high

    def numbers(self, chain_head: int | None = None) -> Iterator[int]:
        """Yield the block numbers in the range, ascending.

        `chain_head` closes an open upper bound and is ignored otherwise.
        """

        low, high = self.min_max()
        if high is None:
            if chain_head is None:
                raise ValueError("an open range needs the chain head number")
            high = chain_head + 1
        return iter(range(low, high))

    def __str__(self) -> str:
        lower = "" if self.lower is None else str(self.lower)
        upper = "" if self.upper is None else str(self.upper)
        sep = _INCLUSIVE_SEP if self.inclusive and self.upper is not None else _EXCLUSIVE_SEP
        return f"{lower}{sep}{upper}"


def _parse_bound(value: str, text: str) -> int | None:
    value = value.strip()
    if not value:
        return None
    try:
        return int(value, 10)
    except ValueError:
        raise InputParseError(f"Invalid range `{text}`: `{value}` is not a block number") from None
