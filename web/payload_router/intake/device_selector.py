"""
Capture device classification and selection.

Selection runs once at startup on the enumerated device list and never
opens anything. Order of preference:

1. The first device whose "name description" contains the configured keyword
   (case-insensitive). No match is not an error; we fall through.
2. The first device that is neither virtual nor a loopback.
3. The first Npcap loopback adapter.
4. The first generic loopback.
5. The first device in enumeration order.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from ..dto import CaptureDeviceDescriptor, DeviceKind
from ..errors import NoDeviceError

logger = logging.getLogger(__name__)

VIRTUAL_KEYWORDS = (
    "vmware",
    "hyper-v",
    "vethernet",
    "nordvpn",
    "wireguard",
    "virtualbox",
    "virtual",
    "vnic",
)

_LOOPBACK_KINDS = ("loopback", "npcap-loopback")


def _folded(name: str, description: str) -> str:
    return f"{name} {description or ''}".lower()


def classify_device(name: str, description: str = "") -> DeviceKind:
    """Derive the device kind from its name and description."""
    text = _folded(name, description)
    if "npcap loopback" in text:
        return "npcap-loopback"
    if "loopback" in text:
        return "loopback"
    if any(k in text for k in VIRTUAL_KEYWORDS):
        return "virtual"
    return "physical"


def describe_device(name: str, description: str = "") -> CaptureDeviceDescriptor:
    return CaptureDeviceDescriptor(
        name=name,
        description=description or "",
        kind=classify_device(name, description),
    )


def describe_devices(pairs: Iterable[tuple]) -> List[CaptureDeviceDescriptor]:
    """Build descriptors from (name, description) pairs, keeping order."""
    return [describe_device(name, desc) for name, desc in pairs]


def select_by_keyword(
    devices: Sequence[CaptureDeviceDescriptor], keyword: Optional[str]
) -> Optional[CaptureDeviceDescriptor]:
    if not keyword or not keyword.strip():
        return None
    needle = keyword.lower()
    for dev in devices:
        if needle in _folded(dev.name, dev.description):
            return dev
    return None


def select_best(devices: Sequence[CaptureDeviceDescriptor]) -> Optional[CaptureDeviceDescriptor]:
    """Automatic heuristic: physical, then Npcap loopback, then loopback, then first."""
    for dev in devices:
        if dev.kind != "virtual" and dev.kind not in _LOOPBACK_KINDS:
            logger.info("Auto-selected physical NIC: %s", dev.label)
            return dev

    for dev in devices:
        if dev.kind == "npcap-loopback":
            logger.info("Falling back to Npcap Loopback Adapter: %s", dev.label)
            return dev

    for dev in devices:
        if dev.kind == "loopback":
            logger.info("Using loopback adapter: %s", dev.label)
            return dev

    if devices:
        logger.info("No real NIC found, using first available adapter: %s", devices[0].label)
        return devices[0]
    return None


def select_device(
    devices: Sequence[CaptureDeviceDescriptor], keyword: Optional[str] = None
) -> CaptureDeviceDescriptor:
    """
    Pick one capture device.

    Raises:
        NoDeviceError: if `devices` is empty.
    """
    if not devices:
        raise NoDeviceError("No network devices found")

    chosen = select_by_keyword(devices, keyword)
    if chosen is not None:
        logger.info("Selected device by keyword %r: %s", keyword, chosen.label)
        return chosen
    if keyword:
        logger.warning("No device matches keyword %r, using automatic selection", keyword)

    return select_best(devices) or devices[0]
