"""
Small text helpers shared by detectors and presenters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def truncate(value: str, limit: int) -> str:
    """Cap `value` at `limit` chars, appending a note with the original length."""
    if len(value) <= limit:
        return value
    return f"{value[:limit]} ... (len={len(value)}, truncated)"


def decode_utf8(payload: bytes) -> Optional[str]:
    """Strict UTF-8 decode; None when the bytes are not valid UTF-8."""
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        return None


def format_ts(ts: float) -> str:
    """Local time with milliseconds, e.g. 2024-05-01 12:00:00.123."""
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
