"""
Port filter: the first gate every transport segment passes through.

A segment passes when filtering is disabled (no allowed ports), or when an
enabled direction (source / destination) carries an allowed port. Ports
<= 0 mean "unknown" and never match.
"""

from __future__ import annotations

from typing import Optional

from ..config import FilterConfig
from ..dto import RawFrame, TransportSegment


def port_allowed(cfg: FilterConfig, src_port: Optional[int], dst_port: Optional[int]) -> bool:
    allowed = cfg.ports
    if not allowed:
        return True

    if cfg.filter_by_source and src_port and src_port > 0 and src_port in allowed:
        return True
    if cfg.filter_by_destination and dst_port and dst_port > 0 and dst_port in allowed:
        return True
    return False


def segment_allowed(cfg: FilterConfig, segment: TransportSegment) -> bool:
    return port_allowed(cfg, segment.src_port, segment.dst_port)


def frame_allowed(cfg: FilterConfig, frame: RawFrame) -> bool:
    """Frame-level variant for dump mode; port-less frames fail an active filter."""
    return port_allowed(cfg, frame.src_port, frame.dst_port)
