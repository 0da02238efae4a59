"""
Split a streamed CSV into smaller CSV documents.

Each emitted block is the header line followed by up to ``chunk_size`` rows,
joined with ``\\n`` and without a trailing newline. Blocks are produced
lazily, so memory stays bounded by one chunk of rows regardless of file size.
"""

import logging
from enum import Enum
from typing import AsyncIterator, Iterable, List, Optional

from .classifier import ClassifiedRow, RowKind, RowReader
from .config import DEFAULT_CHUNK_SIZE, DEFAULT_ENCODING, ChunkOptions
from .errors import StateError
from .sources import ByteSource, describe_source


class GrouperState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    ACCUMULATING = "accumulating"
    DONE = "done"


class ChunkGrouper:
    """
    Group classified rows into header-prefixed text blocks.

    States: AWAITING_HEADER -> ACCUMULATING -> DONE. A block is emitted the
    moment the group reaches ``chunk_size`` rows; finish() emits whatever is
    left and moves to DONE.

    Example:
        >>> grouper = ChunkGrouper(ChunkOptions(chunk_size=2))
        >>> grouper.add_rows(RowReader().feed(b"id\\n1\\n2\\n3\\n"))
        ['id\\n1\\n2']
        >>> grouper.finish()
        ['id\\n3']

    Args:
        options: Chunk size and blank row handling
    """

    def __init__(self, options: Optional[ChunkOptions] = None):
        self.options = options or ChunkOptions()
        self.state = GrouperState.AWAITING_HEADER
        self.header: Optional[str] = None
        self.group: List[str] = []
        self.blocks_emitted = 0
        self.rows_emitted = 0

    def add(self, row: ClassifiedRow) -> Optional[str]:
        """
        Add one row.

        Returns:
            A complete block if this row filled the group, else None
        """
        if self.state is GrouperState.DONE:
            raise StateError("ChunkGrouper.add() called after finish()")

        if self.state is GrouperState.AWAITING_HEADER:
            if row.kind is RowKind.HEADER:
                self.header = row.text
                self.state = GrouperState.ACCUMULATING
            return None

        if row.kind is RowKind.BLANK and not self.options.include_empty_rows:
            return None
        if row.kind is RowKind.HEADER:
            return None

        self.group.append(row.text)
        if len(self.group) >= self.options.chunk_size:
            return self._emit()
        return None

    def add_rows(self, rows: Iterable[ClassifiedRow]) -> List[str]:
        """Add rows in order and return the blocks they completed."""
        blocks = []
        for row in rows:
            block = self.add(row)
            if block is not None:
                blocks.append(block)
        return blocks

    def finish(self) -> List[str]:
        """Emit the partially filled trailing group, if any."""
        if self.state is GrouperState.DONE:
            raise StateError("ChunkGrouper.finish() called twice")

        blocks = []
        if self.group and self.header is not None:
            blocks.append(self._emit())
        self.state = GrouperState.DONE
        return blocks

    def _emit(self) -> str:
        block = self.header + "\n" + "\n".join(self.group)
        self.blocks_emitted += 1
        self.rows_emitted += len(self.group)
        logging.debug(f"Emitting chunk {self.blocks_emitted} with {len(self.group)} row(s)")
        self.group = []
        return block


async def chunk(
    source: ByteSource,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    include_empty_rows: bool = False,
    encoding: str = DEFAULT_ENCODING,
    options: Optional[ChunkOptions] = None,
) -> AsyncIterator[str]:
    """
    Yield CSV blocks of at most ``chunk_size`` rows, each starting with the header.

    The source is closed when iteration ends, fails, or is abandoned through
    ``aclose()``. Use ``contextlib.aclosing`` to stop early deterministically:

        async with aclosing(chunk(source, chunk_size=500)) as blocks:
            async for block in blocks:
                ...

    Args:
        source: Byte source
        chunk_size: Maximum rows per block (must be > 0)
        include_empty_rows: Keep blank rows (as empty lines) inside blocks
        encoding: Text encoding of the stream
        options: ChunkOptions overriding chunk_size / include_empty_rows

    Yields:
        Text blocks ``"<header>\\n<row>\\n...\\n<row>"``

    Raises:
        InvalidOptionsError: If chunk_size is not a positive integer
        SourceReadError: If the source fails
        DecodeError: If the bytes can not be decoded
    """
    try:
        if options is None:
            options = ChunkOptions(
                chunk_size=chunk_size,
                include_empty_rows=include_empty_rows,
            )
        grouper = ChunkGrouper(options)
        reader = RowReader(encoding)

        while not reader.done:
            for block in grouper.add_rows(await reader.pull(source)):
                yield block

        for block in grouper.finish():
            yield block
    finally:
        await source.close()

    logging.debug(
        f"Chunked {grouper.rows_emitted} row(s) from {describe_source(source)} "
        f"into {grouper.blocks_emitted} block(s)"
    )
