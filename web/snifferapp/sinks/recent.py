"""
In-memory buffer of the latest accepted records, read by the HTTP API.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from payload_router.dto import DetectionRecord, RawFrame


class RecentDetections:
    """
    Thread-safe bounded buffer (oldest records evicted first).

    Written from the capture thread, read from Flask request threads.
    """

    def __init__(self, capacity: int = 500) -> None:
        self._items: Deque[Dict[str, object]] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self.total = 0

    def present(self, record: DetectionRecord) -> None:
        item = record.as_dict()
        with self._lock:
            self._items.append(item)
            self.total += 1

    def present_frame(self, frame: RawFrame) -> None:
        # Frame dumps are console-only
        return

    def snapshot(self, limit: Optional[int] = None, protocol: Optional[str] = None) -> List[Dict[str, object]]:
        """Newest first, optionally filtered by protocol tag."""
        with self._lock:
            items = list(self._items)
        items.reverse()
        if protocol:
            items = [i for i in items if i["protocol"] == protocol]
        if limit is not None:
            items = items[: max(limit, 0)]
        return items

    def clear(self) -> int:
        with self._lock:
            n = len(self._items)
            self._items.clear()
            return n

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
