"""Utility functions for hashing operations."""

import hashlib
from pathlib import Path
from typing import BinaryIO

CHUNK_SIZE = 8192


def calculate_stream_hash(
    stream: BinaryIO,
    algorithm: str = "sha256",
    chunk_size: int = CHUNK_SIZE
) -> str:
    """Calculate hash of a binary stream."""
    hasher = hashlib.new(algorithm)

    while chunk := stream.read(chunk_size):
        hasher.update(chunk)

    return hasher.hexdigest()


def calculate_file_hash(
    file_path: Path,
    algorithm: str = "sha256",
    chunk_size: int = CHUNK_SIZE
) -> str:
    """Calculate hash of a file.

    Raises:
        OSError: If the file cannot be read
    """
    with open(file_path, "rb") as f:
        return calculate_stream_hash(f, algorithm, chunk_size)


def calculate_bytes_hash(data: bytes, algorithm: str = "sha256") -> str:
    """Calculate hash of bytes data."""
    hasher = hashlib.new(algorithm)
    hasher.update(data)
    return hasher.hexdigest()
