"""
Content detectors.

Each detector covers one protocol family and exposes:
- can_detect(payload): cheap, pure, never raises.
- extract(payload):    builds a DetectionRecord; may raise ExtractionError.

- JSON  : whole payload is a JSON document starting with '{' or '['.
- HTTP  : request line (known verb + whitespace) or status line (HTTP/x.y).
- Binary: always matches; renders the payload as uppercase hex pairs.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any, Callable, List, Optional, Tuple

from ..dto import DetectionRecord
from ..errors import ExtractionError
from ..utils import decode_utf8, truncate

Clock = Callable[[], float]

# HTTP bodies are kept in the record up to this many chars.
MAX_BODY_CHARS = 4000

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "CONNECT", "TRACE")

_HTTP_REQUEST_RE = re.compile(r"^(?:%s)\s+" % "|".join(HTTP_METHODS), re.IGNORECASE)
_HTTP_STATUS_RE = re.compile(r"^HTTP/\d\.\d", re.IGNORECASE)
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def _looks_like_json_container(text: str) -> bool:
    return text.startswith("{") or text.startswith("[")


def json_text(value: Any) -> str:
    """
    Textual form of one JSON value.

    Strings verbatim, null empty, booleans as True/False, numbers as JSON,
    objects and arrays as indented JSON (2 spaces).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, indent=2)
    return json.dumps(value, ensure_ascii=False)


def _loads(text: str) -> Tuple[bool, Any]:
    # Deeply nested documents exhaust the decoder's recursion limit
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


# --- JSON --------------------------------------------------------------------


class JsonDetector:
    """Payloads that are, in full, a JSON object or array."""

    name = "json"

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock

    def _parse(self, payload: bytes) -> Tuple[bool, Any]:
        if not payload:
            return False, None
        text = decode_utf8(payload)
        if text is None:
            return False, None
        text = text.strip()
        if not text or not _looks_like_json_container(text):
            return False, None
        return _loads(text)

    def can_detect(self, payload: bytes) -> bool:
        ok, _ = self._parse(payload)
        return ok

    def extract(self, payload: bytes) -> DetectionRecord:
        ok, doc = self._parse(payload)
        if not ok:
            raise ExtractionError("Cannot parse payload as JSON")

        record = DetectionRecord(protocol="json", created_at=self._clock())
        if isinstance(doc, dict):
            for key, value in doc.items():
                record.set(str(key), json_text(value))
        elif isinstance(doc, list):
            record.set("array_length", str(len(doc)))
            record.set("array_content", json_text(doc))
        else:
            record.set("value", json_text(doc))
        return record


# --- HTTP --------------------------------------------------------------------


class HttpDetector:
    """
    HTTP/1.x requests and responses carried in a single segment.

    Only the head of the message is interpreted: request/status line and
    header lines. A JSON object body is flattened into the record one level
    deep; its keys overwrite same-named header-derived keys.
    """

    name = "http"

    def __init__(self, clock: Clock = time.time, max_body_chars: int = MAX_BODY_CHARS) -> None:
        self._clock = clock
        self._max_body_chars = max_body_chars

    def _text(self, payload: bytes) -> Optional[str]:
        if not payload:
            return None
        text = decode_utf8(payload)
        if text is None or not text.strip():
            return None
        text = text.lstrip()
        if _HTTP_REQUEST_RE.match(text) or _HTTP_STATUS_RE.match(text):
            return text
        return None

    def can_detect(self, payload: bytes) -> bool:
        return self._text(payload) is not None

    def extract(self, payload: bytes) -> DetectionRecord:
        text = self._text(payload)
        if text is None:
            raise ExtractionError("Cannot parse payload as HTTP")

        record = DetectionRecord(protocol="http", created_at=self._clock())
        head, body = split_head_body(text)

        lines = [ln for ln in _LINE_SPLIT_RE.split(head) if ln]
        if lines:
            first = lines[0]
            record.set("request_line", first)
            is_response = first[:5].upper() == "HTTP/"
            record.set("http_type", "response" if is_response else "request")

        for line in lines[1:]:
            colon = line.find(":")
            if colon > 0:
                record.set(f"header_{line[:colon].strip()}", line[colon + 1:].strip())

        if body.strip():
            self._add_body(record, body.strip())
        return record

    def _add_body(self, record: DetectionRecord, body: str) -> None:
        record.set("body_raw", truncate(body, self._max_body_chars))

        if not _looks_like_json_container(body):
            record.set("body_text", body)
            return

        ok, doc = _loads(body)
        if not ok:
            record.set("body_text", body)
            return

        if isinstance(doc, dict):
            for key, value in doc.items():
                record.set(str(key), json_text(value))
        else:
            record.set("body_json", body)


def split_head_body(text: str) -> Tuple[str, str]:
    """Split at the first blank line (CRLF CRLF, else LF LF). No separator: all head."""
    for sep in ("\r\n\r\n", "\n\n"):
        idx = text.find(sep)
        if idx > 0:
            return text[:idx], text[idx + len(sep):]
    return text, ""


# --- Binary (fallback) -------------------------------------------------------


class BinaryDetector:
    """Fallback: accepts everything, never fails."""

    name = "binary"

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock

    def can_detect(self, payload: bytes) -> bool:
        return True

    def extract(self, payload: bytes) -> DetectionRecord:
        record = DetectionRecord(protocol="binary", created_at=self._clock())
        record.set("hex", hex_pairs(payload or b""))
        return record


def hex_pairs(data: bytes) -> str:
    """b"\\x01\\xab" -> "01 AB"."""
    return data.hex(" ").upper() if data else ""


def default_detectors(clock: Clock = time.time) -> List[Any]:
    """JSON, HTTP, Binary, in the order the chain must try them."""
    return [JsonDetector(clock), HttpDetector(clock), BinaryDetector(clock)]
