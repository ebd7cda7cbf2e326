"""
Hexagonal interfaces (Ports) for the detection-and-routing pipeline.

These define the boundary between the core (filters, detectors, router) and
I/O adapters (live capture, console, message queue). Keep them small so
they are easy to fake in tests.
"""

from __future__ import annotations

from typing import Callable, List, Protocol

from .dto import CaptureDeviceDescriptor, DetectionRecord, RawFrame

# (timestamp, raw link-layer bytes, link type tag)
FrameHandler = Callable[[float, bytes, str], None]


class DetectorPort(Protocol):
    """
    One protocol family: capability check plus field extraction.

    `can_detect` is pure and must never raise. `extract` is only called after
    `can_detect` returned True for the same payload; it may raise
    ExtractionError.
    """

    name: str

    def can_detect(self, payload: bytes) -> bool:
        ...

    def extract(self, payload: bytes) -> DetectionRecord:
        ...


class PresenterPort(Protocol):
    """Renders records for humans. Return values are ignored by the core."""

    def present(self, record: DetectionRecord) -> None:
        """Render one accepted DetectionRecord."""
        ...

    def present_frame(self, frame: RawFrame) -> None:
        """Render one full frame (dump mode, no detection)."""
        ...


class PublisherPort(Protocol):
    """
    Sends short derived strings to an external durable queue.
    No delivery acknowledgement is surfaced to the pipeline.
    """

    def publish(self, message: str) -> None:
        ...


class CaptureSourcePort(Protocol):
    """
    Live capture collaborator: enumerate devices, open one, then push every
    frame to a handler on a single capture thread until stopped.
    """

    def list_devices(self) -> List[CaptureDeviceDescriptor]:
        ...

    def open(self, device: CaptureDeviceDescriptor) -> None:
        """Open the device in promiscuous mode. Raises CaptureOpenError."""
        ...

    def run(self, handler: FrameHandler) -> None:
        """Block, invoking `handler` per frame, until stop() is called."""
        ...

    def stop(self) -> None:
        ...

    def close(self) -> None:
        ...
