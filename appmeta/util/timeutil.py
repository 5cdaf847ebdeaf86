"""Utility functions for time operations."""

import time
from datetime import datetime, timezone
from typing import Union


def now_timestamp() -> int:
    """Get the current time as whole epoch seconds."""
    return int(time.time())


def timestamp_to_iso(timestamp: Union[int, float]) -> str:
    """Convert Unix timestamp to ISO 8601 format."""
    dt = datetime.fromtimestamp(timestamp, timezone.utc)
    return dt.isoformat()
