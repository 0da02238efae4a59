"""
Row classification shared by the counting and chunking pipelines.

A row is a trimmed line. The first non-blank row is the header; every later
row is either data or blank. Blank lines before the header are discarded
outright.
"""

import logging
from enum import Enum
from typing import List, NamedTuple, Optional

from .config import DEFAULT_ENCODING
from .framer import LineFramer
from .sources import ByteSource, read_chunk


class RowKind(str, Enum):
    HEADER = "header"
    DATA = "data"
    BLANK = "blank"


class ClassifiedRow(NamedTuple):
    """A trimmed row with its kind and 1-based physical line number."""

    kind: RowKind
    text: str
    line_number: int


class RowClassifier:
    """
    Classify lines as header, data or blank.

    Keeps a single piece of state: whether the header has been seen.
    """

    def __init__(self) -> None:
        self.has_seen_header = False
        self.lines_seen = 0

    def classify(self, line: str) -> Optional[ClassifiedRow]:
        """
        Classify one raw line.

        Returns:
            The classified row, or None for a blank line before the header
        """
        self.lines_seen += 1
        trimmed = line.strip()

        if not self.has_seen_header:
            if not trimmed:
                return None
            self.has_seen_header = True
            return ClassifiedRow(RowKind.HEADER, trimmed, self.lines_seen)

        kind = RowKind.DATA if trimmed else RowKind.BLANK
        return ClassifiedRow(kind, trimmed, self.lines_seen)


class RowReader:
    """
    Turn raw byte chunks into classified rows.

    Combines a LineFramer and a RowClassifier. Blank rows after the header are
    held back until a data row follows them; blank rows still held at end of
    input are trailing blanks and are dropped, so trailing newlines never turn
    into rows.

    Example:
        >>> reader = RowReader()
        >>> [row.text for row in reader.feed(b"id\\n1\\n\\n")]
        ['id', '1']
        >>> [row.text for row in reader.feed(b"2\\n\\n\\n")]
        ['', '2']
        >>> reader.finish()
        []

    Args:
        encoding: Text encoding of the stream (default: utf-8-sig)
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.framer = LineFramer(encoding)
        self.classifier = RowClassifier()
        # Blank rows waiting for a following data row. They are always
        # consecutive lines, so the first line number and a count suffice.
        self.held_blank_count = 0
        self._first_held_blank_line = 0

    @property
    def done(self) -> bool:
        """True once end of input has been processed."""
        return self.framer.finished

    async def pull(self, source: ByteSource) -> List[ClassifiedRow]:
        """Read the next chunk from ``source`` and classify it, finishing at end of input."""
        chunk = await read_chunk(source)
        if chunk is None:
            return self.finish()
        return self.feed(chunk)

    def feed(self, chunk: bytes) -> List[ClassifiedRow]:
        """Classify the rows completed by ``chunk``."""
        return self._classify_lines(self.framer.feed(chunk))

    def finish(self) -> List[ClassifiedRow]:
        """Classify the final rows and drop trailing blanks."""
        rows = self._classify_lines(self.framer.finish())
        if self.held_blank_count:
            logging.debug(
                f"Dropped {self.held_blank_count} trailing blank line(s) "
                f"starting at line {self._first_held_blank_line}"
            )
            self.held_blank_count = 0
        return rows

    def _classify_lines(self, lines: List[str]) -> List[ClassifiedRow]:
        rows: List[ClassifiedRow] = []
        for line in lines:
            row = self.classifier.classify(line)
            if row is None:
                continue
            if row.kind is RowKind.BLANK:
                if not self.held_blank_count:
                    self._first_held_blank_line = row.line_number
                self.held_blank_count += 1
                continue
            if row.kind is RowKind.DATA and self.held_blank_count:
                first = self._first_held_blank_line
                rows.extend(
                    ClassifiedRow(RowKind.BLANK, "", first + i)
                    for i in range(self.held_blank_count)
                )
                self.held_blank_count = 0
            rows.append(row)
        return rows
