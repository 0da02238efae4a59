"""
Incremental line framing over a stream of byte chunks.

The framer owns the decode buffer for one pipeline invocation:
- An incremental decoder keeps partial multi-byte sequences between chunks
- Decoded text accumulates until a newline completes a line
- At end of input the unterminated remainder becomes one last line
"""

import codecs
from typing import List

from .config import DEFAULT_ENCODING, require_encoding
from .errors import DecodeError, StateError


NEWLINE = "\n"


class LineFramer:
    """
    Split a chunked byte stream into lines.

    Lines are returned raw (untrimmed); classification happens downstream.
    Only ``\\n`` delimits lines, so a ``\\r`` from CRLF input stays at the end
    of the line until it is trimmed.

    Example:
        >>> framer = LineFramer()
        >>> framer.feed(b"id,name\\n1,Wid")
        ['id,name']
        >>> framer.feed(b"get\\n2,Gadget")
        ['1,Widget']
        >>> framer.finish()
        ['2,Gadget']

    Args:
        encoding: Text encoding of the stream (default: utf-8-sig)
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.encoding = require_encoding(encoding)
        self._decoder = codecs.getincrementaldecoder(self.encoding)(errors="strict")
        # Pieces of the current unterminated line, joined once it completes
        self._pending: List[str] = []
        self._bytes_seen = 0
        self._finished = False

    @property
    def pending(self) -> str:
        """Decoded text not yet terminated by a newline."""
        return "".join(self._pending)

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, chunk: bytes) -> List[str]:
        """
        Decode ``chunk`` and return every line it completes.

        Args:
            chunk: Next raw chunk; may be empty

        Returns:
            Complete lines in stream order (possibly none)

        Raises:
            DecodeError: If the bytes are not valid in the configured encoding
            StateError: If called after finish()
        """
        if self._finished:
            raise StateError("LineFramer.feed() called after finish()")

        text = self._decode(chunk, final=False)
        self._bytes_seen += len(chunk)
        return self._take_lines(text)

    def finish(self) -> List[str]:
        """
        Flush the decoder and return the remaining lines.

        The unterminated remainder is returned as a final line when it is
        non-empty, whitespace included. Blankness is decided later.
        """
        if self._finished:
            raise StateError("LineFramer.finish() called twice")
        self._finished = True

        lines = self._take_lines(self._decode(b"", final=True))
        if self._pending:
            lines.append("".join(self._pending))
            self._pending = []
        return lines

    def _decode(self, chunk: bytes, final: bool) -> str:
        # Undecoded bytes held back from earlier chunks come first in exc.start
        carried = self._carried_bytes()
        try:
            return self._decoder.decode(chunk, final)
        except UnicodeDecodeError as exc:
            position = self._bytes_seen - carried + exc.start
            raise DecodeError(
                f"Cannot decode input as {self.encoding} at about byte "
                f"{position}: {exc.reason}",
                offset=position,
            ) from exc

    def _carried_bytes(self) -> int:
        try:
            buffered = self._decoder.getstate()[0]
        except (AttributeError, TypeError, IndexError):
            return 0
        return len(buffered) if isinstance(buffered, bytes) else 0

    def _take_lines(self, text: str) -> List[str]:
        if NEWLINE not in text:
            if text:
                self._pending.append(text)
            return []

        lines = text.split(NEWLINE)
        if self._pending:
            self._pending.append(lines[0])
            lines[0] = "".join(self._pending)
        # Everything after the last newline is still incomplete
        tail = lines.pop()
        self._pending = [tail] if tail else []
        return lines
