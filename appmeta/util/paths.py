"""Utility functions for path operations."""

import os
import tempfile
from pathlib import Path

from .logging import get_logger

logger = get_logger(__name__)


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_path_component(name: str) -> str:
    """Validate a single path component such as a package name or user handle.

    Separators and other problematic characters are rejected, not replaced.
    """
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid path component: {name!r}")

    for char in ("/", "\\", "\0", "\n", "\r"):
        if char in name:
            raise ValueError(f"Invalid character {char!r} in path component: {name!r}")

    return name


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write data to path so that readers see either the old or the new content.

    The bytes go to a temporary file in the same directory, are flushed to disk
    and then renamed over the target. The temporary file is removed on failure.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove temporary file {tmp_path}: {e}")
        raise

    logger.debug(f"Atomically wrote {len(data)} bytes to {path}")
