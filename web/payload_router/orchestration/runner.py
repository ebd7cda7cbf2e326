"""
Per-frame orchestration.

`PacketPipeline` is the handler the capture collaborator calls for every
frame. Everything runs synchronously inside that call:

    decode -> port filter -> detector chain -> path filter -> enrich -> sinks

There is no internal queue. The next frame is not looked at until the
current one has reached every sink, so sink latency back-pressures capture.
Only the counters below outlive a call.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional

from ..config import FilterConfig
from ..dto import DetectionRecord, RawFrame, TransportSegment
from ..intake.frame_decoder import LINK_ETHERNET, decode_frame
from ..pipeline.emitter import SinkDispatcher
from ..pipeline.enrichment import enrich
from ..pipeline.path_filter import passes_path_filter
from ..pipeline.port_filter import frame_allowed, segment_allowed
from ..pipeline.router import DetectorChain

logger = logging.getLogger(__name__)

_COUNTERS = (
    "frames_seen",
    "undecodable",
    "segments_seen",
    "port_filtered",
    "no_record",
    "path_filtered",
    "dispatched",
)


class PacketPipeline:
    """
    Parameters
    ----------
    cfg : FilterConfig
        Immutable filter settings.
    chain : DetectorChain
        Ordered detectors; should have a fallback registered.
    dispatcher : SinkDispatcher
        Receives accepted records.
    clock : callable
        Source of detection timestamps (epoch seconds).
    dump_frames : bool
        Full-frame mode: frames passing the port filter go to presenters
        as-is and detection is skipped.
    """

    def __init__(
        self,
        cfg: FilterConfig,
        chain: DetectorChain,
        dispatcher: SinkDispatcher,
        *,
        clock: Callable[[], float] = time.time,
        dump_frames: bool = False,
    ) -> None:
        self.cfg = cfg
        self.chain = chain
        self.dispatcher = dispatcher
        self.dump_frames = dump_frames
        self._clock = clock
        self._lock = threading.Lock()
        self._stats: Dict[str, int] = {k: 0 for k in _COUNTERS}

    def _bump(self, key: str) -> None:
        with self._lock:
            self._stats[key] += 1

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats)

    # --- entry points ---

    def process_raw(self, ts: float, data: bytes, link_type: str = LINK_ETHERNET) -> Optional[DetectionRecord]:
        """Capture callback: decode raw link-layer bytes and process them."""
        frame = decode_frame(ts, data, link_type)
        if frame is None:
            self._bump("frames_seen")
            self._bump("undecodable")
            logger.debug("Skipping undecodable %s frame (%d bytes)", link_type, len(data))
            return None
        return self.process_frame(frame)

    def process_frame(self, frame: RawFrame) -> Optional[DetectionRecord]:
        self._bump("frames_seen")

        if self.dump_frames:
            if frame_allowed(self.cfg, frame):
                self.dispatcher.dispatch_frame(frame)
            else:
                self._bump("port_filtered")
            return None

        segment = frame.segment()
        if segment is None:
            return None
        return self.process_segment(segment)

    def process_segment(self, segment: TransportSegment) -> Optional[DetectionRecord]:
        """Run one TCP/UDP payload through the filters and detectors."""
        if not segment.payload:
            return None
        self._bump("segments_seen")

        if not segment_allowed(self.cfg, segment):
            self._bump("port_filtered")
            return None

        record = self.chain.detect(segment.payload)
        if record is None:
            self._bump("no_record")
            return None

        if not passes_path_filter(self.cfg, record):
            self._bump("path_filtered")
            return None

        enrich(record, segment, now=self._clock())
        self.dispatcher.dispatch(record)
        self._bump("dispatched")
        return record
