"""CSV Tools - Streaming row counting and chunking for line-delimited CSV."""

from .chunker import ChunkGrouper, chunk
from .classifier import ClassifiedRow, RowClassifier, RowKind, RowReader
from .config import ChunkOptions, CountOptions, SourceConfig
from .counter import RowCounter, count_data_rows, count_rows
from .errors import (
    CsvToolsError,
    DecodeError,
    InvalidOptionsError,
    SourceReadError,
    StateError,
)
from .framer import LineFramer
from .sources import (
    ByteSource,
    BytesSource,
    FileSource,
    HttpSource,
    IterableSource,
    open_source,
)

__version__ = "0.1.0"

__all__ = [
    "count_rows",
    "count_data_rows",
    "chunk",
    "LineFramer",
    "RowClassifier",
    "RowReader",
    "RowKind",
    "ClassifiedRow",
    "RowCounter",
    "ChunkGrouper",
    "CountOptions",
    "ChunkOptions",
    "SourceConfig",
    "ByteSource",
    "BytesSource",
    "IterableSource",
    "FileSource",
    "HttpSource",
    "open_source",
    "CsvToolsError",
    "SourceReadError",
    "DecodeError",
    "InvalidOptionsError",
    "StateError",
]
