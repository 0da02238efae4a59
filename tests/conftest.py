"""
Pytest configuration and shared fixtures.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest

from csv_tools import BytesSource, chunk, count_rows


class TrackingSource:
    """
    Wrap a source and record how it was used.

    Optionally fails on the ``fail_on_read``-th read (1-based) with ``error``.
    """

    name = "<tracking>"

    def __init__(self, inner, fail_on_read: Optional[int] = None, error: Optional[Exception] = None):
        self.inner = inner
        self.fail_on_read = fail_on_read
        self.error = error or OSError("connection reset")
        self.reads = 0
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def read(self):
        self.reads += 1
        if self.fail_on_read is not None and self.reads >= self.fail_on_read:
            raise self.error
        return await self.inner.read()

    async def close(self):
        self.close_calls += 1
        await self.inner.close()


async def _collect(blocks) -> List[str]:
    return [block async for block in blocks]


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def products_csv(fixtures_dir):
    """Header, five data rows and one blank row in the middle."""
    return fixtures_dir / "products.csv"


@pytest.fixture
def products_crlf_csv(fixtures_dir):
    """Same shape as products.csv with CRLF line endings and three data rows."""
    return fixtures_dir / "products_crlf.csv"


@pytest.fixture
def cities_bom_csv(fixtures_dir):
    """UTF-8 with BOM, multi-byte characters and trailing blank lines."""
    return fixtures_dir / "cities_bom.csv"


@pytest.fixture
def tracking_source():
    """Factory for TrackingSource instances."""
    return TrackingSource


@pytest.fixture
def count():
    """Count rows of a text, served ``read_size`` bytes at a time."""

    def _count(text: str, read_size: int = 65536, **kwargs) -> int:
        source = BytesSource.from_text(text, read_size=read_size)
        return asyncio.run(count_rows(source, **kwargs))

    return _count


@pytest.fixture
def chunks():
    """Collect every block chunk() yields for a text."""

    def _chunks(text: str, read_size: int = 65536, **kwargs) -> List[str]:
        source = BytesSource.from_text(text, read_size=read_size)
        return asyncio.run(_collect(chunk(source, **kwargs)))

    return _chunks


@pytest.fixture
def collect():
    """Run an async iterator of blocks to completion and return them."""

    def _run(blocks) -> List[str]:
        return asyncio.run(_collect(blocks))

    return _run
