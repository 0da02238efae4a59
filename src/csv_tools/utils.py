"""
Utility functions for CSV Tools.

Includes run folder naming, chunk file naming and run metadata helpers used
by the command-line interface.
"""

import json
import os
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .config import DEFAULT_CHUNK_SIZE


def source_stem(location: str) -> str:
    """
    Derive a file-name friendly stem from a source location.

    Examples:
        "data/people.csv"                  -> "people"
        "https://example.com/x/export.csv" -> "export"
        "-"                                -> "stdin"
    """
    if location == "-":
        return "stdin"

    if location.startswith(("http://", "https://")):
        path = urlparse(location).path
        base = os.path.basename(path.rstrip("/")) or urlparse(location).netloc
    else:
        base = os.path.basename(location)

    stem = os.path.splitext(base)[0]
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in stem)
    return safe or "csv"


def generate_run_folder_name(
    location: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    include_empty_rows: bool = False,
) -> str:
    """
    Generate a unique folder name for a chunk run based on timestamp and parameters.

    Format: YYYYMMDD_HHMMSS_<stem>_<flags>

    Args:
        location: Source location (path, URL or "-")
        chunk_size: Rows per chunk
        include_empty_rows: Whether blank rows are kept

    Returns:
        Folder name string
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    flags = []
    if chunk_size != DEFAULT_CHUNK_SIZE:
        flags.append(f"c{chunk_size}")
    if include_empty_rows:
        flags.append("empty")

    parts = [timestamp, source_stem(location)]
    if flags:
        parts.append("_".join(flags))

    return "_".join(parts)


def generate_chunk_filename(stem: str, index: int) -> str:
    """File name of the ``index``-th (1-based) chunk written for ``stem``."""
    return f"{stem}_part_{index:04d}.csv"


def save_run_metadata(
    run_dir: str,
    location: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    include_empty_rows: bool = False,
    max_chunks: Optional[int] = None,
    encoding: Optional[str] = None,
    read_size: Optional[int] = None,
) -> str:
    """
    Save metadata about a chunk run to the run directory.

    Args:
        run_dir: Directory to save metadata in
        Other args: Configuration values to record

    Returns:
        Path to the saved metadata file
    """
    is_local = location != "-" and not location.startswith(("http://", "https://"))
    metadata = {
        "timestamp": datetime.now().isoformat(),
        "source": os.path.abspath(location) if is_local else location,
        "chunk_size": chunk_size,
        "include_empty_rows": include_empty_rows,
        "max_chunks": max_chunks,
        "encoding": encoding,
        "read_size": read_size,
    }

    metadata_path = os.path.join(run_dir, "run_metadata.json")
    with open(metadata_path, 'w', encoding='utf-8') as f:
        json.dump(metadata, f, indent=2)

    return metadata_path


def create_summary_structure(
    chunk_count: int = 0,
    row_count: int = 0,
    run_folder: Optional[str] = None,
    runtime_seconds: float = 0.0,
    files: Optional[List[str]] = None,
    stopped_early: bool = False,
) -> "OrderedDict[str, Any]":
    """
    Create a standard chunk run summary.

    Args:
        chunk_count: Number of chunk files written
        row_count: Rows written across all chunks (headers excluded)
        run_folder: Name of the run folder
        runtime_seconds: Total runtime
        files: Names of the chunk files
        stopped_early: Whether --max-chunks left blocks unwritten

    Returns:
        OrderedDict with standard summary structure
    """
    summary: "OrderedDict[str, Any]" = OrderedDict()
    summary["chunk_count"] = chunk_count
    summary["row_count"] = row_count
    if run_folder:
        summary["run_folder"] = run_folder
    summary["total_runtime_seconds"] = round(runtime_seconds, 2)
    summary["stopped_early"] = stopped_early
    summary["files"] = files or []
    return summary


def write_summary(path: str, summary: Dict[str, Any]) -> str:
    """Write a summary dictionary as indented JSON and return the path."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    return path
