"""
Configuration and constants for CSV Tools.

All configurable values are centralized here for easy customization.
Users can create a local config file (.csv-tools.json) to override the
command-line defaults.
"""

import codecs
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import InvalidOptionsError


# ============================================================================
# DEFAULT VALUES
# ============================================================================

# Data rows per emitted chunk
DEFAULT_CHUNK_SIZE: int = 100

# Bytes requested from a source per read
DEFAULT_READ_SIZE: int = 65536

# utf-8-sig drops a leading BOM and otherwise decodes plain UTF-8
DEFAULT_ENCODING: str = "utf-8-sig"

# HTTP request timeout in seconds (5 minutes)
DEFAULT_TIMEOUT: int = 300

# Default output directory for chunk files
DEFAULT_OUTPUT_DIR: str = "chunks"

# Local config file name (should be gitignored)
LOCAL_CONFIG_FILENAME: str = ".csv-tools.json"


def find_local_config() -> Optional[Path]:
    """
    Search for local config file in current directory and parents.

    Returns:
        Path to config file if found, None otherwise
    """
    current = Path.cwd()

    # Check current directory and parents up to home or root
    for directory in [current] + list(current.parents):
        config_path = directory / LOCAL_CONFIG_FILENAME
        if config_path.exists():
            return config_path
        # Stop at home directory
        if directory == Path.home():
            break

    return None


def load_local_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from a local .csv-tools.json file.

    Args:
        config_path: Explicit file to load (searched for when omitted)

    Returns:
        Dictionary of configuration values, empty dict if no config found
    """
    if config_path is None:
        config_path = find_local_config()
    if config_path is None:
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logging.warning(f"Error loading {config_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logging.warning(f"Ignoring {config_path}: expected a JSON object")
        return {}
    return data


# Load local config once at module import
_LOCAL_CONFIG: Dict[str, Any] = load_local_config()


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a config value, checking local config first."""
    return _LOCAL_CONFIG.get(key, default)


def require_positive_int(value: Any, name: str) -> int:
    """Return ``value`` if it is a positive int, else raise InvalidOptionsError."""
    # bool is an int subclass; True must not pass as a size of 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOptionsError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidOptionsError(f"{name} must be greater than zero, got {value}")
    return value


def require_encoding(encoding: str) -> str:
    """Return the canonical codec name for ``encoding``."""
    try:
        return codecs.lookup(encoding).name
    except (LookupError, TypeError) as exc:
        raise InvalidOptionsError(f"Unknown encoding: {encoding!r}") from exc


@dataclass(frozen=True)
class CountOptions:
    """Inclusion rules for row counting."""

    count_header_row: bool = False
    count_empty_rows: bool = False


@dataclass(frozen=True)
class ChunkOptions:
    """Configuration for chunking a CSV stream into header-prefixed blocks."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    include_empty_rows: bool = False

    def __post_init__(self) -> None:
        require_positive_int(self.chunk_size, "chunk_size")


@dataclass(frozen=True)
class SourceConfig:
    """How byte sources are opened and read."""

    read_size: int = field(default_factory=lambda: get_config_value("read_size", DEFAULT_READ_SIZE))
    encoding: str = field(default_factory=lambda: get_config_value("encoding", DEFAULT_ENCODING))
    timeout: int = field(default_factory=lambda: get_config_value("timeout", DEFAULT_TIMEOUT))
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        require_positive_int(self.read_size, "read_size")
        require_positive_int(self.timeout, "timeout")
        require_encoding(self.encoding)
