"""
Exceptions raised by CSV Tools.

Every error raised by the library derives from CsvToolsError so callers can
catch the whole family with a single except clause. Underlying causes
(OSError, aiohttp errors, UnicodeDecodeError) are chained with ``from``.
"""

from typing import Optional


class CsvToolsError(Exception):
    """Base class for all CSV Tools errors."""


class SourceReadError(CsvToolsError):
    """The byte source failed to produce the next chunk."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class DecodeError(CsvToolsError):
    """
    Bytes could not be decoded, even with cross-chunk buffering.

    Args:
        message: Human readable description
        offset: Approximate byte position (within the whole stream) of the
            undecodable bytes
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class InvalidOptionsError(CsvToolsError, ValueError):
    """An option value (chunk size, encoding, read size...) is invalid."""


class StateError(CsvToolsError):
    """A framer or grouper was used after it had already finished."""
