"""
HTTP path filter: a second gate that only ever looks at HTTP requests.

The path is the second whitespace-separated token of the request line
("METHOD PATH VERSION"). With filters configured, a request is kept only if
its path contains one of them (plain, case-insensitive substring). Responses
and non-HTTP records are never filtered here.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..config import FilterConfig
from ..dto import DetectionRecord


def is_http_request(record: DetectionRecord) -> bool:
    return (
        record.protocol == "http"
        and (record.get("http_type") or "").lower() == "request"
    )


def _request_token(record: DetectionRecord, index: int) -> str:
    parts = (record.get("request_line") or "").split()
    return parts[index] if len(parts) > index else ""


def request_method(record: DetectionRecord) -> str:
    return _request_token(record, 0)


def request_path(record: DetectionRecord) -> str:
    return _request_token(record, 1)


def path_allowed(filters: Optional[Iterable[str]], path: str) -> bool:
    if not filters:
        return True
    # Blank entries never match; a list of only blanks rejects every path
    needles = [f.lower() for f in filters if f and f.strip()]
    haystack = path.lower()
    return any(n in haystack for n in needles)


def passes_path_filter(cfg: FilterConfig, record: DetectionRecord) -> bool:
    if not is_http_request(record):
        return True
    return path_allowed(cfg.http_path_filters, request_path(record))
