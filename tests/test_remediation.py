from __future__ import annotations

import pytest

from blockfix.core.domain.models import DivergenceReport
from blockfix.core.errors import StoreError
from blockfix.core.services.remediation import is_affirmative, remediate, truncate
from fakes import InMemoryBlockStore, make_hash


def test_divergent_blocks_are_displayed_then_deleted():
    store = InMemoryBlockStore()
    a, b, c = make_hash(1), make_hash(2), make_hash(3)
    for number, h in enumerate((a, b, c), 1):
        store.add(h, number, {})
    events: list[tuple[str, object]] = []
    def display(report: DivergenceReport) -> None:
        events.append(("display", report.hash))
        assert report.hash in store.hashes()

    original_delete = store.delete

    def delete(hashes):
        events.append(("delete", hashes[0]))
        original_delete(hashes)

    store.delete = delete  # type: ignore[method-assign]

    deleted = remediate(
        store,
        [
            DivergenceReport(hash=a, diff="~ /n: 1 -> 2"),
            DivergenceReport(hash=b),
            DivergenceReport(hash=c, diff="+ /x: 1"),
        ],
        display=display,
    )

    assert deleted == [a, c]
    assert events == [("display", a), ("delete", a), ("display", c), ("delete", c)]
    assert store.hashes() == [b]


def test_nothing_is_deleted_without_divergence():
    store = InMemoryBlockStore()
    store.add(make_hash(1), 1, {})
    assert remediate(store, [DivergenceReport(hash=make_hash(1))]) == []
    assert store.delete_calls == []


def test_store_failures_become_store_errors():
    class BrokenStore(InMemoryBlockStore):
        def delete(self, hashes):
            raise OSError("disk full")

    with pytest.raises(StoreError, match="disk full"):
        remediate(BrokenStore(), [DivergenceReport(hash=make_hash(1), diff="+ /x: 1")])


def test_truncate_with_skip_confirmation_does_not_prompt():
    store = InMemoryBlockStore()
    store.add(make_hash(1), 1, {})

    def confirm() -> bool:
        raise AssertionError("should not prompt")

    assert truncate(store, skip_confirmation=True, confirm=confirm) is True
    assert store.truncated
    assert store.rows == []


def test_declined_truncate_leaves_the_cache_untouched():
    store = InMemoryBlockStore()
    store.add(make_hash(1), 1, {})
    messages: list[str] = []

    done = truncate(store, skip_confirmation=False, confirm=lambda: False, notify=messages.append)

    assert done is False
    assert messages == ["Aborting."]
    assert not store.truncated
    assert store.hashes() == [make_hash(1)]


def test_confirmed_truncate_deletes_everything():
    store = InMemoryBlockStore()
    store.add(make_hash(1), 1, {})
    assert truncate(store, skip_confirmation=False, confirm=lambda: True)
    assert store.truncated


@pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", " Yes \n"])
def test_affirmative_answers(answer):
    assert is_affirmative(answer)


@pytest.mark.parametrize("answer", ["", "n", "no", "yep", "ye", None])
def test_anything_else_declines(answer):
    assert not is_affirmative(answer)
