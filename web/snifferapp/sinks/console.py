"""
Console presenter: human-readable rendering of records and raw frames.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from payload_router.dto import DetectionRecord, RawFrame
from payload_router.pipeline.path_filter import is_http_request, request_method
from payload_router.utils import format_ts, truncate

# Each field value printed is capped at this many chars.
MAX_FIELD_CHARS = 2000

_RULE = "=" * 80
_THIN_RULE = "-" * 80


def render_record(record: DetectionRecord, max_field_chars: int = MAX_FIELD_CHARS) -> str:
    """
    [2024-05-01 12:00:00.123] Protocol=http
      request_line: GET / HTTP/1.1
      ...
    """
    ts = record.detected_at if record.detected_at is not None else record.created_at
    lines = [f"[{format_ts(ts)}] Protocol={record.protocol}"]
    for key, value in record.items():
        lines.append(f"  {key}: {truncate(value or '', max_field_chars)}")
    return "\n".join(lines) + "\n"


def render_request_summary(record: DetectionRecord) -> str:
    """One line per HTTP request: time, method, path and ports."""
    ts = record.detected_at if record.detected_at is not None else record.created_at
    return (
        f"[{format_ts(ts)}] {request_method(record)} {record.get('http_path', '')}"
        f"  (src:{record.get('source_port', '?')} -> dst:{record.get('destination_port', '?')})"
    )


def hexdump(data: bytes, width: int = 16) -> List[str]:
    """Offset, hex pairs and an ASCII gutter, `width` bytes per line."""
    out = []
    for i in range(0, len(data), width):
        chunk = data[i:i + width]
        hex_part = " ".join(f"{b:02X}" for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        out.append(f"{i:04X}: {hex_part:<{width * 3}} | {ascii_part}")
    return out


def printable_text(data: bytes) -> str:
    text = data.decode("utf-8", errors="replace")
    return "".join(c for c in text if c.isprintable() or c in "\r\n\t")


def render_frame(frame: RawFrame, max_payload_bytes: int = 256) -> str:
    lines = [
        "",
        _RULE,
        f"Captured at: {format_ts(frame.ts)}",
        _THIN_RULE,
        f"Length: {frame.length} bytes",
        f"Link layer: {frame.link_type}",
    ]
    if frame.src_mac:
        lines.append(f"Source MAC: {frame.src_mac}")
    if frame.dst_mac:
        lines.append(f"Destination MAC: {frame.dst_mac}")

    if frame.network:
        lines.append("")
        lines.append(f"Network protocol: {frame.network}")
        if frame.src_ip:
            lines.append(f"Source IP: {frame.src_ip}")
        if frame.dst_ip:
            lines.append(f"Destination IP: {frame.dst_ip}")
        if frame.ip_header_length is not None:
            lines.append(f"IP header length: {frame.ip_header_length} bytes")
        if frame.ttl is not None:
            lines.append(f"TTL: {frame.ttl}")

    if frame.transport:
        lines.append("")
        lines.append(f"Transport protocol: {frame.transport}")
        if frame.transport in ("TCP", "UDP"):
            lines.append(f"Source port: {frame.src_port}")
            lines.append(f"Destination port: {frame.dst_port}")
        if frame.transport == "TCP":
            if frame.tcp_flags:
                lines.append(f"TCP flags: {frame.tcp_flags}")
            lines.append(f"Sequence number: {frame.tcp_seq}")
            lines.append(f"Acknowledgment number: {frame.tcp_ack}")
        elif frame.transport == "UDP" and frame.udp_length is not None:
            lines.append(f"UDP length: {frame.udp_length} bytes")

    payload = frame.payload
    if payload:
        shown = payload[:max_payload_bytes]
        truncated = len(payload) > max_payload_bytes
        lines.append("")
        lines.append(f"Payload length: {len(payload)} bytes")
        lines.append("")
        lines.append("Payload (hex):")
        lines.extend(hexdump(shown))
        if truncated:
            lines.append(f"... (truncated, first {max_payload_bytes} bytes shown)")
        lines.append("")
        lines.append("Payload (text):")
        lines.append(printable_text(shown))
        if truncated:
            lines.append("... (truncated)")
    else:
        lines.append("")
        lines.append("Payload: none")

    lines.append(_RULE)
    return "\n".join(lines) + "\n"


class ConsolePresenter:
    """
    Writes to a text stream (stdout by default).

    HTTP requests get a one-line summary; with `verbose=True` the full field
    dump follows. Every other record is dumped in full.
    """

    def __init__(self, stream: Optional[TextIO] = None, *, verbose: bool = False,
                 max_payload_bytes: int = 256) -> None:
        self._stream = stream
        self.verbose = verbose
        self.max_payload_bytes = max_payload_bytes

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def present(self, record: DetectionRecord) -> None:
        out = self.stream
        if is_http_request(record):
            out.write(_RULE + "\n")
            out.write(render_request_summary(record) + "\n")
            if not self.verbose:
                out.flush()
                return
        out.write(render_record(record))
        out.flush()

    def present_frame(self, frame: RawFrame) -> None:
        self.stream.write(render_frame(frame, self.max_payload_bytes))
        self.stream.flush()
