"""
Row counting over a streamed CSV.

Counts rows under configurable inclusion rules without holding more than one
chunk (plus the current partial line) in memory.
"""

import logging
from typing import Iterable, Optional

from .classifier import ClassifiedRow, RowKind, RowReader
from .config import DEFAULT_ENCODING, CountOptions
from .sources import ByteSource, describe_source


class RowCounter:
    """
    Accumulate a row count from classified rows.

    Example:
        >>> counter = RowCounter(CountOptions(count_header_row=True))
        >>> counter.add_rows(RowReader().feed(b"id\\n1\\n2\\n"))
        >>> counter.total
        3

    Args:
        options: Which row kinds are counted (data rows always are)
    """

    def __init__(self, options: Optional[CountOptions] = None):
        self.options = options or CountOptions()
        self.total = 0

    def add(self, row: ClassifiedRow) -> None:
        if row.kind is RowKind.DATA:
            self.total += 1
        elif row.kind is RowKind.HEADER:
            if self.options.count_header_row:
                self.total += 1
        elif self.options.count_empty_rows:
            self.total += 1

    def add_rows(self, rows: Iterable[ClassifiedRow]) -> None:
        for row in rows:
            self.add(row)


async def count_rows(
    source: ByteSource,
    *,
    count_header_row: bool = False,
    count_empty_rows: bool = False,
    encoding: str = DEFAULT_ENCODING,
    options: Optional[CountOptions] = None,
) -> int:
    """
    Count the rows of a CSV stream.

    By default only data rows are counted: the header (first non-blank line)
    and blank lines are skipped. Blank lines before the header and after the
    last data row are never counted.

    Args:
        source: Byte source; always closed before this returns or raises
        count_header_row: Count the header row too
        count_empty_rows: Count blank rows between header and last data row
        encoding: Text encoding of the stream
        options: CountOptions overriding the two flags above

    Returns:
        Number of counted rows

    Raises:
        SourceReadError: If the source fails
        DecodeError: If the bytes can not be decoded
    """
    if options is None:
        options = CountOptions(
            count_header_row=count_header_row,
            count_empty_rows=count_empty_rows,
        )

    counter = RowCounter(options)
    try:
        reader = RowReader(encoding)
        while not reader.done:
            counter.add_rows(await reader.pull(source))
    finally:
        await source.close()

    logging.debug(f"Counted {counter.total} row(s) in {describe_source(source)}")
    return counter.total


async def count_data_rows(source: ByteSource, *, encoding: str = DEFAULT_ENCODING) -> int:
    """Count data rows, excluding the header and blank rows."""
    return await count_rows(source, encoding=encoding)
