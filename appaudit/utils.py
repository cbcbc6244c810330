"""
Core Utilities for the audit engine
"""

import hashlib
from datetime import datetime, timezone
from typing import Optional


def get_utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: Optional[datetime] = None, format_str: str = "%Y%m%d_%H%M%S") -> str:
    """Format timestamp consistently."""
    if dt is None:
        dt = get_utc_now()
    return dt.strftime(format_str)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def from_epoch(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def sha256_hex(data: bytes) -> str:
    """Lower-case hex SHA-256 digest."""
    return hashlib.sha256(data).hexdigest()
