"""Utility module initialization."""

from .hashing import calculate_bytes_hash, calculate_file_hash, calculate_stream_hash
from .logging import get_logger, setup_logging
from .paths import atomic_write_bytes, ensure_directory, safe_path_component
from .timeutil import now_timestamp, timestamp_to_iso

__all__ = [
    # hashing
    "calculate_bytes_hash",
    "calculate_file_hash",
    "calculate_stream_hash",
    # logging
    "get_logger",
    "setup_logging",
    # paths
    "atomic_write_bytes",
    "ensure_directory",
    "safe_path_component",
    # timeutil
    "now_timestamp",
    "timestamp_to_iso",
]
