"""
packet_sniffer.py

Live capture adapter over Scapy/libpcap (Npcap on Windows).

It enumerates devices, opens one in promiscuous mode, and hands every frame
to a handler as (timestamp, raw bytes, link type). Decoding of the bytes is
left to payload_router's frame decoder.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from scapy.all import conf, sniff  # type: ignore[import-untyped]
from scapy.layers.inet import IP  # type: ignore[import-untyped]
from scapy.layers.inet6 import IPv6  # type: ignore[import-untyped]
from scapy.layers.l2 import CookedLinux, Ether, Loopback  # type: ignore[import-untyped]

from payload_router.dto import CaptureDeviceDescriptor
from payload_router.errors import CaptureOpenError
from payload_router.intake.device_selector import describe_devices
from payload_router.intake.frame_decoder import (
    LINK_ETHERNET,
    LINK_LINUX_SLL,
    LINK_LOOPBACK,
    LINK_RAW,
)
from payload_router.ports import FrameHandler


def link_type_of(packet) -> str:
    """Map the outermost Scapy layer to a frame decoder link type."""
    if isinstance(packet, Ether):
        return LINK_ETHERNET
    if isinstance(packet, Loopback):
        return LINK_LOOPBACK
    if isinstance(packet, CookedLinux):
        return LINK_LINUX_SLL
    if isinstance(packet, (IP, IPv6)):
        return LINK_RAW
    return type(packet).__name__.lower()


class LiveSniffer:
    """Capture frames from one network interface until stopped.

    A single capture thread calls `run()`; every frame is passed to the
    handler synchronously, so the next frame is read only after the handler
    returns. `stop()` may be called from any thread: the in-flight handler
    call completes, then the timed sniff loop notices the flag within one
    read timeout.

    Attributes:
        logger: A `logging.Logger` used for progress and status messages.
        read_timeout: Seconds each sniff round waits before re-checking stop.
        device: The descriptor passed to `open()`, if any.
        packet_count: Frames handed to the handler so far.
    """

    @staticmethod
    def list_interfaces() -> List[Tuple[str, str]]:
        """Return (name, description) for every interface Scapy knows about.

        If Scapy raises, an empty list is returned.
        """
        try:
            out = []
            for iface in conf.ifaces.values():
                name = getattr(iface, "network_name", None) or iface.name
                parts = [p for p in (iface.name, iface.description) if p and p != name]
                # Linux/BSD loopbacks ("lo", "lo0") carry no descriptive text
                if iface.name == conf.loopback_name and not any("loopback" in p.lower() for p in parts):
                    parts.append("Loopback")
                out.append((name, " ".join(dict.fromkeys(parts))))
            return out
        except Exception:
            return []

    def __init__(self, logger: logging.Logger, read_timeout_ms: int = 1000) -> None:
        if not isinstance(logger, logging.Logger):
            raise TypeError("logger must be an instance of logging.Logger")

        self.logger: logging.Logger = logger
        self.read_timeout: float = max(read_timeout_ms, 10) / 1000.0
        self.device: Optional[CaptureDeviceDescriptor] = None
        self.packet_count: int = 0
        self._socket = None
        self._stop = threading.Event()

    def list_devices(self) -> List[CaptureDeviceDescriptor]:
        return describe_devices(self.list_interfaces())

    def open(self, device: CaptureDeviceDescriptor) -> None:
        """Open `device` in promiscuous mode.

        Raises:
            CaptureOpenError: If the OS or libpcap refuses (missing privileges,
                unknown interface, driver not installed).
        """
        try:
            self._socket = conf.L2listen(iface=device.name, promisc=True)
        except Exception as e:
            raise CaptureOpenError(f"Cannot open device '{device.label}': {e}") from e
        self.device = device
        self._stop.clear()
        self.logger.info("Using device: %s [%s]", device.label, device.kind)

    def run(self, handler: FrameHandler) -> None:
        """Block and feed frames to `handler` until `stop()` is called."""
        if self._socket is None:
            raise CaptureOpenError("Capture device is not open")

        def _cb(pkt) -> None:
            self.packet_count += 1
            try:
                handler(float(pkt.time), bytes(pkt), link_type_of(pkt))
            except Exception:
                self.logger.exception("Error processing packet")

        self.logger.info("Packet capture started")
        try:
            # Timed loop => stop even if no packets arrive
            while not self._stop.is_set():
                sniff(
                    opened_socket=self._socket,
                    prn=_cb,
                    store=False,
                    timeout=self.read_timeout,
                    stop_filter=lambda _p: self._stop.is_set(),
                )
        finally:
            self.logger.info("Packet capture stopped")

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        """Release the capture socket. Safe to call twice."""
        sock, self._socket = self._socket, None
        if sock is not None:
            sock.close()
