"""
Main execution logic for CSV Tools.

This module contains the run functions behind the command-line interface:
- Counting rows of a local file, stdin or remote CSV
- Chunking a CSV into header-prefixed part files inside a run folder
"""

import asyncio
import logging
import os
from contextlib import aclosing
from datetime import datetime
from typing import Any, Dict, List, Optional

from .chunker import chunk
from .config import ChunkOptions, CountOptions, SourceConfig
from .counter import count_rows
from .errors import CsvToolsError
from .sources import open_source
from .utils import (
    create_summary_structure,
    generate_chunk_filename,
    generate_run_folder_name,
    save_run_metadata,
    source_stem,
    write_summary,
)


async def run_count(
    location: str,
    options: CountOptions,
    source_config: SourceConfig,
) -> int:
    """
    Count rows of a CSV location.

    Args:
        location: Local path, URL or "-" for stdin
        options: Header / blank row inclusion rules
        source_config: How to open and decode the source

    Returns:
        Number of counted rows
    """
    logging.info(f"Counting rows in {location}")
    start_time = datetime.now()

    source = open_source(location, source_config)
    total = await count_rows(source, encoding=source_config.encoding, options=options)

    duration = (datetime.now() - start_time).total_seconds()
    logging.info(f"Counted {total} row(s) in {duration:.2f}s")
    return total


async def run_chunk(
    location: str,
    options: ChunkOptions,
    source_config: SourceConfig,
    output_dir: str,
    max_chunks: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Split a CSV location into part files.

    Files are written to ``<output_dir>/<run folder>/`` together with
    run_metadata.json and summary.json.

    Args:
        location: Local path, URL or "-" for stdin
        options: Chunk size and blank row handling
        source_config: How to open and decode the source
        output_dir: Base directory for run folders
        max_chunks: Stop after this many part files (default: no limit)

    Returns:
        The run summary
    """
    run_start_time = datetime.now()

    run_folder_name = generate_run_folder_name(
        location,
        chunk_size=options.chunk_size,
        include_empty_rows=options.include_empty_rows,
    )
    run_output_dir = os.path.join(output_dir, run_folder_name)
    logging.info(f"Creating run folder: {run_output_dir}")
    os.makedirs(run_output_dir, exist_ok=True)

    metadata_path = save_run_metadata(
        run_output_dir,
        location,
        chunk_size=options.chunk_size,
        include_empty_rows=options.include_empty_rows,
        max_chunks=max_chunks,
        encoding=source_config.encoding,
        read_size=source_config.read_size,
    )
    logging.info(f"Run metadata saved to {metadata_path}")

    stem = source_stem(location)
    files: List[str] = []
    row_count = 0
    stopped_early = False

    source = open_source(location, source_config)
    blocks = chunk(source, encoding=source_config.encoding, options=options)
    async with aclosing(blocks):
        async for block in blocks:
            file_name = generate_chunk_filename(stem, len(files) + 1)
            with open(os.path.join(run_output_dir, file_name), "w", encoding="utf-8", newline="\n") as f:
                f.write(block)
                f.write("\n")

            files.append(file_name)
            row_count += block.count("\n")
            logging.debug(f"Wrote {file_name}")

            if max_chunks is not None and len(files) >= max_chunks:
                # Only a further block means something was actually left out
                stopped_early = await anext(blocks, None) is not None
                if stopped_early:
                    logging.info(f"Stopping after {len(files)} chunk(s) (--max-chunks {max_chunks})")
                break

    total_runtime = (datetime.now() - run_start_time).total_seconds()
    summary = create_summary_structure(
        chunk_count=len(files),
        row_count=row_count,
        run_folder=run_folder_name,
        runtime_seconds=total_runtime,
        files=files,
        stopped_early=stopped_early,
    )
    summary_path = write_summary(os.path.join(run_output_dir, "summary.json"), summary)

    logging.info(f"Summary written to {summary_path}")
    logging.info(f"\n{'='*60}")
    logging.info(f"Wrote {len(files)} chunk(s) with {row_count} row(s) to {run_output_dir}")
    logging.info(f"Total runtime: {total_runtime:.2f}s")
    logging.info(f"{'='*60}")
    return summary


def run_main(args) -> int:
    """
    Main entry point that dispatches to the requested command.

    Args:
        args: Parsed command line arguments

    Returns:
        Process exit code
    """
    return asyncio.run(_async_main(args))


async def _async_main(args) -> int:
    """Async main function."""
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s: %(message)s'
    )

    try:
        source_config = SourceConfig(
            read_size=args.read_size,
            encoding=args.encoding,
            timeout=args.timeout,
            verify_ssl=not args.no_verify_ssl,
        )

        if args.command == "count":
            total = await run_count(
                args.source,
                CountOptions(
                    count_header_row=args.count_header_row,
                    count_empty_rows=args.count_empty_rows,
                ),
                source_config,
            )
            print(total)
            return 0

        await run_chunk(
            args.source,
            ChunkOptions(
                chunk_size=args.chunk_size,
                include_empty_rows=args.include_empty_rows,
            ),
            source_config,
            output_dir=args.output_dir,
            max_chunks=args.max_chunks,
        )
        return 0

    except (CsvToolsError, OSError) as e:
        logging.error(f"{args.command} failed: {e}")
        return 1
