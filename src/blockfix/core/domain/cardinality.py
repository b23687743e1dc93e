"""Helpers for collections expected to hold exactly one item.

Hash and number lookups both go through `expect_single`, so the
NotFound/Ambiguous wording stays the same everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, TypeVar

from blockfix.core.errors import AmbiguousError, NotFoundError

T = TypeVar("T")


@dataclass(frozen=True)
class Exactly(Generic[T]):
    value: T


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Multiple:
    count: int


def single_item(collection: Iterable[T]) -> Exactly[T] | Empty | Multiple:
    """Classify `collection` as exactly one item, empty, or several items."""

    items = list(collection)
    if not items:
        return Empty()
    if len(items) == 1:
        return Exactly(items[0])
    return Multiple(len(items))


def expect_single(name: str, collection: Iterable[T], *, hint: str = "") -> T:
    """Return the only item of `collection` or raise a resolution error.

    `name` describes the item ("block", "block hash for number 5") and ends
    up in the error message. `hint` is appended to the ambiguity message.
    """

    result = single_item(collection)
    if isinstance(result, Exactly):
        return result.value
    if isinstance(result, Empty):
        raise NotFoundError(f"Expected a single {name} but found none.")
    message = f"Expected a single {name} but found {result.count} occurrences."
    if hint:
        message = f"{message} {hint}"
    raise AmbiguousError(message, count=result.count)
