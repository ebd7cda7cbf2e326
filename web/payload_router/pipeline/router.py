"""
Detector chain: ordered, first-match-wins dispatch with a guaranteed fallback.

Algorithm for one payload:
1. Try detectors in registration order. The first whose can_detect() is True
   gets extract() called once.
2. If extract() (or can_detect()) raises, log it on the diagnostics logger
   and move on to the next detector. The same detector is never retried.
3. If nothing produced a record, call the registered fallback directly,
   unless it already failed in step 2.
4. No fallback, or the fallback failed too: the payload is dropped (None).

Diagnostics go to the "payload_router.detectors" logger, never to sinks.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from ..dto import DetectionRecord
from ..ports import DetectorPort
from .detectors import BinaryDetector, Clock, default_detectors

diag = logging.getLogger("payload_router.detectors")


class DetectorChain:
    """Fixed-order registry of detectors."""

    def __init__(self) -> None:
        self._detectors: List[DetectorPort] = []
        self._fallback: Optional[DetectorPort] = None

    # --- registration ---

    def register(self, detector: DetectorPort, *, fallback: bool = False) -> None:
        """
        Append a detector. A BinaryDetector, or any detector registered with
        fallback=True, becomes the last-resort detector.
        """
        if detector is None:
            raise TypeError("detector must not be None")
        self._detectors.append(detector)
        if fallback or isinstance(detector, BinaryDetector):
            self._fallback = detector

    @property
    def detectors(self) -> List[DetectorPort]:
        return list(self._detectors)

    @property
    def fallback(self) -> Optional[DetectorPort]:
        return self._fallback

    # --- detection ---

    def detect(self, payload: bytes) -> Optional[DetectionRecord]:
        """Return exactly one record for a non-empty payload when a fallback exists."""
        if not payload:
            return None

        failed = []
        for detector in self._detectors:
            try:
                if not detector.can_detect(payload):
                    continue
                return detector.extract(payload)
            except Exception as e:
                diag.warning("Detector %s failed: %s", _name(detector), e)
                failed.append(detector)
                continue

        if self._fallback is None:
            diag.debug("No detector matched and no fallback registered; dropping payload")
            return None
        if any(d is self._fallback for d in failed):
            return None

        try:
            return self._fallback.extract(payload)
        except Exception as e:
            diag.warning("Fallback detector %s failed: %s", _name(self._fallback), e)
            return None


def _name(detector: DetectorPort) -> str:
    return getattr(detector, "name", type(detector).__name__)


def default_chain(clock: Clock = time.time) -> DetectorChain:
    """JSON, then HTTP, then Binary as fallback."""
    chain = DetectorChain()
    for detector in default_detectors(clock):
        chain.register(detector)
    return chain
