"""Property-based tests for counting and chunking."""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from csv_tools import IterableSource, chunk, count_rows


# Cells never contain newlines; blank rows may carry stray whitespace
cell = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\n\r\ufeff"),
    min_size=1,
    max_size=8,
)
row = st.one_of(
    st.lists(cell, min_size=1, max_size=3).map(",".join),
    st.sampled_from(["", " ", "\t", "  "]),
)
csv_text = st.lists(row, max_size=30).map("\n".join)


def split_at(data: bytes, cuts):
    """Split ``data`` at the given (possibly repeated) byte offsets."""
    points = sorted({min(c, len(data)) for c in cuts})
    pieces, start = [], 0
    for point in points:
        pieces.append(data[start:point])
        start = point
    pieces.append(data[start:])
    return pieces


async def _collect(blocks):
    return [block async for block in blocks]


def run_count(pieces, **kwargs):
    return asyncio.run(count_rows(IterableSource(pieces), **kwargs))


def run_chunk(pieces, **kwargs):
    return asyncio.run(_collect(chunk(IterableSource(pieces), **kwargs)))


@settings(max_examples=75, deadline=None)
@given(text=csv_text, cuts=st.lists(st.integers(min_value=0, max_value=400), max_size=10))
def test_count_does_not_depend_on_chunk_boundaries(text, cuts):
    data = text.encode("utf-8")
    for flags in ({}, {"count_empty_rows": True}, {"count_header_row": True}):
        assert run_count(split_at(data, cuts), **flags) == run_count([data], **flags)


@settings(max_examples=75, deadline=None)
@given(
    text=csv_text,
    cuts=st.lists(st.integers(min_value=0, max_value=400), max_size=10),
    chunk_size=st.integers(min_value=1, max_value=7),
)
def test_chunk_does_not_depend_on_chunk_boundaries(text, cuts, chunk_size):
    data = text.encode("utf-8")
    assert run_chunk(split_at(data, cuts), chunk_size=chunk_size) == run_chunk(
        [data], chunk_size=chunk_size
    )


@settings(max_examples=75, deadline=None)
@given(text=csv_text)
def test_header_row_adds_one_when_present(text):
    data = [text.encode("utf-8")]
    has_header = any(line.strip() for line in text.split("\n"))
    assert run_count(data, count_header_row=True) == run_count(data) + int(has_header)


@settings(max_examples=75, deadline=None)
@given(text=csv_text, chunk_size=st.integers(min_value=1, max_value=7), include_empty=st.booleans())
def test_blocks_carry_every_counted_row(text, chunk_size, include_empty):
    data = [text.encode("utf-8")]
    blocks = run_chunk(data, chunk_size=chunk_size, include_empty_rows=include_empty)
    expected = run_count(data, count_empty_rows=include_empty)

    body_rows = [block.split("\n")[1:] for block in blocks]
    assert sum(len(rows) for rows in body_rows) == expected
    assert all(1 <= len(rows) <= chunk_size for rows in body_rows)
    assert len({block.split("\n")[0] for block in blocks}) <= 1
