"""
Enrichment: stamp transport metadata onto an accepted record (in place).

Keys written: source_port, destination_port, transport_protocol and, for
HTTP requests, http_path. They overwrite same-named keys a detector may
have extracted from the payload.
"""

from __future__ import annotations

from ..dto import DetectionRecord, TransportSegment
from .path_filter import is_http_request, request_path


def enrich(record: DetectionRecord, segment: TransportSegment, *, now: float) -> DetectionRecord:
    record.detected_at = now
    record.set("source_port", str(segment.src_port))
    record.set("destination_port", str(segment.dst_port))
    record.set("transport_protocol", segment.transport)
    if is_http_request(record):
        record.set("http_path", request_path(record))
    return record
