"""
Command-line interface for CSV Tools.

Provides argument parsing and CLI entry point.
"""

import argparse
import sys
from typing import List, Optional

from .config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ENCODING,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_READ_SIZE,
    DEFAULT_TIMEOUT,
    get_config_value,
)


BANNER = r"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                                                                              ║
║    ██████╗███████╗██╗   ██╗    ████████╗ ██████╗  ██████╗ ██╗     ███████╗   ║
║   ██╔════╝██╔════╝██║   ██║    ╚══██╔══╝██╔═══██╗██╔═══██╗██║     ██╔════╝   ║
║   ██║     ███████╗██║   ██║       ██║   ██║   ██║██║   ██║██║     ███████╗   ║
║   ██║     ╚════██║╚██╗ ██╔╝       ██║   ██║   ██║██║   ██║██║     ╚════██║   ║
║   ╚██████╗███████║ ╚████╔╝        ██║   ╚██████╔╝╚██████╔╝███████╗███████║   ║
║    ╚═════╝╚══════╝  ╚═══╝         ╚═╝    ╚═════╝  ╚═════╝ ╚══════╝╚══════╝   ║
║                                                                              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter for prettier help output."""

    def __init__(self, prog, indent_increment=2, max_help_position=40, width=100):
        super().__init__(prog, indent_increment, max_help_position, width)

    def _format_action_invocation(self, action):
        if not action.option_strings:
            return super()._format_action_invocation(action)
        return ', '.join(action.option_strings)


def positive_int(value: str) -> int:
    """argparse type for integers greater than zero."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value}")
    return number


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Input and debugging options shared by every command."""
    parser.add_argument(
        'source',
        metavar='SOURCE',
        help='CSV to read: a local path, an http(s) URL, or "-" for stdin.'
    )

    input_group = parser.add_argument_group(
        '📥 Input Options',
        'How the source is read and decoded'
    )
    input_group.add_argument(
        '--encoding', '-e',
        type=str,
        default=get_config_value('encoding', DEFAULT_ENCODING),
        metavar='CODEC',
        help=f'Text encoding of the input.\n'
             f'(default: {DEFAULT_ENCODING}, strips a UTF-8 BOM)'
    )
    input_group.add_argument(
        '--read-size',
        type=positive_int,
        default=get_config_value('read_size', DEFAULT_READ_SIZE),
        metavar='BYTES',
        help=f'Bytes requested from the source per read.\n'
             f'(default: {DEFAULT_READ_SIZE})'
    )
    input_group.add_argument(
        '--timeout', '-t',
        type=positive_int,
        default=get_config_value('timeout', DEFAULT_TIMEOUT),
        metavar='SECS',
        help=f'HTTP request timeout in seconds for URL sources.\n'
             f'(default: {DEFAULT_TIMEOUT})'
    )
    input_group.add_argument(
        '--no-verify-ssl',
        action='store_true',
        help='Skip TLS certificate verification for URL sources.'
    )

    debug_group = parser.add_argument_group(
        '🔍 Debugging',
        'Options for troubleshooting and verbose output'
    )
    debug_group.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose/debug output.'
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    description = f"""{BANNER}
  Streaming row counter and splitter for line-delimited CSV files.

  Files are read chunk by chunk and never loaded whole. Rows are lines;
  the first non-blank line is the header.
"""

    epilog = """
  Count data rows (header and blank lines excluded):
  ──────────────────────────────────────────────────
    %(prog)s count people.csv

  Count every row including the header:
  ─────────────────────────────────────
    %(prog)s count people.csv --count-header-row --count-empty-rows

  Split a remote export into files of 500 rows:
  ─────────────────────────────────────────────
    %(prog)s chunk https://example.com/export.csv --chunk-size 500
"""

    parser = argparse.ArgumentParser(
        prog='csv-tools',
        description=description,
        epilog=epilog,
        formatter_class=CustomHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    # count
    count_parser = subparsers.add_parser(
        'count',
        help='Count the rows of a CSV',
        description='Count rows. By default only data rows are counted.',
        formatter_class=CustomHelpFormatter,
    )
    _add_common_arguments(count_parser)
    count_group = count_parser.add_argument_group(
        '⚙️  Count Options',
        'Which rows are counted'
    )
    count_group.add_argument(
        '--count-header-row',
        action='store_true',
        help='Include the header row in the count.'
    )
    count_group.add_argument(
        '--count-empty-rows',
        action='store_true',
        help='Include blank rows after the header.\n'
             'Blank lines after the last data row are never counted.'
    )

    # chunk
    chunk_parser = subparsers.add_parser(
        'chunk',
        help='Split a CSV into header-prefixed part files',
        description='Split a CSV into part files, each starting with the header.',
        formatter_class=CustomHelpFormatter,
    )
    _add_common_arguments(chunk_parser)
    chunk_group = chunk_parser.add_argument_group(
        '⚙️  Chunk Options',
        'Size and content of each part'
    )
    chunk_group.add_argument(
        '--chunk-size', '-c',
        type=positive_int,
        default=get_config_value('chunk_size', DEFAULT_CHUNK_SIZE),
        metavar='ROWS',
        help=f'Maximum rows per part, header excluded.\n'
             f'(default: {DEFAULT_CHUNK_SIZE})'
    )
    chunk_group.add_argument(
        '--include-empty-rows',
        action='store_true',
        help='Keep blank rows inside parts.'
    )
    chunk_group.add_argument(
        '--max-chunks', '-n',
        type=positive_int,
        default=None,
        metavar='NUM',
        help='Stop after writing this many parts.\n'
             '(default: no limit)'
    )

    output_group = chunk_parser.add_argument_group(
        '📤 Output Configuration',
        'Control where parts are saved'
    )
    output_group.add_argument(
        '--output-dir', '-o',
        type=str,
        default=get_config_value('output_dir', DEFAULT_OUTPUT_DIR),
        metavar='DIR',
        help=f'Base directory for part files.\n'
             f'A timestamped subfolder is created per run.\n'
             f'(default: {DEFAULT_OUTPUT_DIR})'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    from .main import run_main

    parser = create_parser()
    args = parser.parse_args(argv)
    return run_main(args)


if __name__ == "__main__":
    sys.exit(main())
