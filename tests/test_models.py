from __future__ import annotations

import pytest

from blockfix.core.domain.cardinality import Empty, Exactly, Multiple, expect_single, single_item
from blockfix.core.domain.models import BlockHash, CheckResult, DivergenceReport
from blockfix.core.errors import AmbiguousError, InputParseError, NotFoundError

HEX = "ab" * 32


@pytest.mark.parametrize("text", [HEX, "0x" + HEX, "0X" + HEX.upper(), "  0x" + HEX + "\n"])
def test_block_hash_round_trips_to_canonical_form(text):
    block_hash = BlockHash.from_hex(text)
    assert block_hash.hex() == "0x" + HEX
    assert BlockHash.from_hex(block_hash.hex()) == block_hash
    assert str(block_hash) == "0x" + HEX


@pytest.mark.parametrize(
    "text",
    [
        "",
        "0x",
        "ab" * 31,
        "ab" * 33,
        "0x" + "ab" * 31 + "a",
        "zz" * 32,
        "ab " * 32,
    ],
)
def test_block_hash_rejects_malformed_text(text):
    with pytest.raises(InputParseError):
        BlockHash.from_hex(text)


def test_block_hash_is_hashable_and_serializes_as_hex():
    a = BlockHash.from_hex(HEX)
    b = BlockHash.from_hex("0x" + HEX.upper())
    assert {a: 1}[b] == 1
    report = DivergenceReport(hash=a, diff="~ /number: 1 -> 2")
    assert report.model_dump(mode="json") == {"hash": "0x" + HEX, "diff": "~ /number: 1 -> 2"}


def test_check_result_lists_diverged_reports():
    a = BlockHash(value=b"\x01" * 32)
    b = BlockHash(value=b"\x02" * 32)
    result = CheckResult(
        checked=2,
        reports=[DivergenceReport(hash=a), DivergenceReport(hash=b, diff="+ /x: 1")],
        deleted=[b],
    )
    assert [r.hash for r in result.diverged] == [b]
    assert result.model_dump(mode="json")["deleted"] == [b.hex()]


def test_single_item_classifies_collections():
    assert single_item([]) == Empty()
    assert single_item(["a"]) == Exactly("a")
    assert single_item(iter(["a", "b", "c"])) == Multiple(3)


def test_expect_single_raises_resolution_errors():
    assert expect_single("block", ["only"]) == "only"
    with pytest.raises(NotFoundError, match="found none"):
        expect_single("block", [])
    with pytest.raises(AmbiguousError, match="found 2 occurrences") as ctx:
        expect_single("block", [1, 2], hint="Use a hash.")
    assert ctx.value.count == 2
    assert "Use a hash." in str(ctx.value)
