from __future__ import annotations

import pytest

from blockfix.core.domain.block_range import BlockRange
from blockfix.core.errors import InputParseError


def test_fully_open_range_starts_at_one():
    block_range = BlockRange.parse("..")
    assert block_range.min_max() == (1, None)
    assert block_range.is_open
    assert block_range.inclusive


def test_open_inclusive_separator_is_the_same_as_exclusive():
    assert BlockRange.parse("..=").min_max() == (1, None)


@pytest.mark.parametrize("text", ["5..", "5..="])
def test_open_upper_bound_is_always_inclusive(text):
    block_range = BlockRange.parse(text)
    assert block_range.min_max() == (5, None)
    assert block_range.inclusive
    assert list(block_range.numbers(chain_head=7)) == [5, 6, 7]


def test_exclusive_upper_bound_without_lower():
    assert list(BlockRange.parse("..10").numbers()) == list(range(1, 10))


def test_inclusive_upper_bound_without_lower():
    assert list(BlockRange.parse("..=10").numbers()) == list(range(1, 11))


def test_closed_exclusive_range():
    block_range = BlockRange.parse("3..7")
    assert block_range.min_max() == (3, 7)
    assert list(block_range.numbers()) == [3, 4, 5, 6]


def test_closed_inclusive_range():
    block_range = BlockRange.parse("3..=7")
    assert block_range.min_max() == (3, 8)
    assert list(block_range.numbers()) == [3, 4, 5, 6, 7]


def test_equal_bounds():
    assert list(BlockRange.parse("3..3").numbers()) == []
    assert list(BlockRange.parse("3..=3").numbers()) == [3]


def test_zero_lower_bound_means_first_block():
    assert list(BlockRange.parse("0..3").numbers()) == [1, 2]


def test_surrounding_whitespace_is_ignored():
    assert list(BlockRange.parse(" 3 ..= 4 ").numbers()) == [3, 4]


def test_reversed_range_is_rejected():
    with pytest.raises(InputParseError, match="Invalid range"):
        BlockRange.parse("7..3")


@pytest.mark.parametrize("text", ["-3..5", "-3..", "-1..=2"])
def test_negative_lower_bound_is_rejected(text):
    with pytest.raises(InputParseError, match="negative block number"):
        BlockRange.parse(text)


@pytest.mark.parametrize("text", ["..-5", "..=-1"])
def test_negative_upper_bound_is_rejected(text):
    with pytest.raises(InputParseError, match="negative block number"):
        BlockRange.parse(text)


@pytest.mark.parametrize("text", ["..0", "..=0"])
def test_zero_upper_bound_is_an_empty_range(text):
    assert list(BlockRange.parse(text).numbers()) == []


@pytest.mark.parametrize("text", ["10", "", "3-7", "abc..5", "1..x", "1...5"])
def test_malformed_text_is_rejected(text):
    with pytest.raises(InputParseError):
        BlockRange.parse(text)


def test_open_range_needs_chain_head():
    with pytest.raises(ValueError):
        list(BlockRange.parse("4..").numbers())


def test_str_renders_the_normalized_range():
    assert str(BlockRange.parse("3..=7")) == "3..=7"
    assert str(BlockRange.parse("3..")) == "3.."
    assert str(BlockRange.parse("..10")) == "..10"
