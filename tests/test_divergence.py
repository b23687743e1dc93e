from __future__ import annotations

import pytest
from pydantic import BaseModel

from blockfix.core.domain.models import CachedBlock, CanonicalBlock
from blockfix.core.errors import UpstreamError
from blockfix.core.services.divergence import (
    DiffEntry,
    compare_blocks,
    compare_pair,
    diff_documents,
    documents_equal,
    normalize_document,
    render_diff,
)
from fakes import make_hash

CACHED = {"number": 5, "parent": {"hash": "0x01", "number": 4}, "txs": ["t1", "t2"]}


def test_key_order_does_not_matter():
    canonical = {"txs": ["t1", "t2"], "parent": {"number": 4, "hash": "0x01"}, "number": 5}
    assert documents_equal(CACHED, canonical)
    assert compare_pair(CACHED, canonical) is None


def test_changed_leaf_is_reported():
    canonical = {**CACHED, "parent": {"hash": "0x02", "number": 4}}
    assert compare_pair(CACHED, canonical) == '~ /parent/hash: "0x01" -> "0x02"'


def test_added_key_is_reported():
    diff = compare_pair(CACHED, {**CACHED, "size": 10})
    assert diff == "+ /size: 10"


def test_removed_key_is_reported():
    canonical = {k: v for k, v in CACHED.items() if k != "txs"}
    assert compare_pair(CACHED, canonical) == '- /txs: ["t1", "t2"]'


def test_reordered_array_is_a_divergence():
    diff = compare_pair(CACHED, {**CACHED, "txs": ["t2", "t1"]})
    assert diff is not None
    assert '~ /txs/0: "t1" -> "t2"' in diff
    assert '~ /txs/1: "t2" -> "t1"' in diff


def test_appended_array_element_is_reported():
    diff = compare_pair(CACHED, {**CACHED, "txs": ["t1", "t2", "t3"]})
    assert diff == '+ /txs/2: "t3"'


def test_bool_and_int_are_not_equal():
    assert not documents_equal({"ok": True}, {"ok": 1})
    assert compare_pair({"ok": True}, {"ok": 1}) == "~ /ok: true -> 1"


def test_type_change_between_container_and_scalar():
    assert diff_documents({"a": [1]}, {"a": {"0": 1}}) == [
        DiffEntry(op="change", path="/a", old=[1], new={"0": 1})
    ]


def test_root_scalar_change_uses_root_pointer():
    assert render_diff(diff_documents(1, 2)) == "~ /: 1 -> 2"


def test_pointer_escapes_slashes_and_tildes():
    [entry] = diff_documents({}, {"a/b~c": 1})
    assert entry.path == "/a~1b~0c"


def test_empty_delta_counts_as_equal():
    assert compare_pair({"a": 1}, {"a": 2}, differ=lambda left, right: []) is None


def test_normalize_document_unifies_representations():
    class Header(BaseModel):
        number: int
        miner: str

    value = {"header": Header(number=5, miner="0xabc"), "logs": ("a", b"\xff"), 7: None}
    assert normalize_document(value) == {
        "header": {"number": 5, "miner": "0xabc"},
        "logs": ["a", "0xff"],
        "7": None,
    }


def test_compare_blocks_reports_in_input_order():
    a, b = make_hash(1), make_hash(2)
    cached = [CachedBlock(hash=a, payload={"n": 1}), CachedBlock(hash=b, payload={"n": 2})]
    canonical = [CanonicalBlock(hash=a, payload={"n": 1}), CanonicalBlock(hash=b, payload={"n": 3})]

    reports = compare_blocks(cached, canonical)

    assert [r.hash for r in reports] == [a, b]
    assert [r.diverged for r in reports] == [False, True]
    assert reports[1].diff == "~ /n: 2 -> 3"


def test_compare_blocks_rejects_misaligned_pairs():
    a, b = make_hash(1), make_hash(2)
    with pytest.raises(UpstreamError):
        compare_blocks([CachedBlock(hash=a, payload={})], [])
    with pytest.raises(UpstreamError):
        compare_blocks([CachedBlock(hash=a, payload={})], [CanonicalBlock(hash=b, payload={})])
