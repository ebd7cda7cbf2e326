"""
Data Transfer Objects (DTOs) used across the detection-and-routing pipeline.

RawFrame / TransportSegment are immutable views produced once per capture
callback. DetectionRecord is the only mutable object: a detector creates it,
enrichment adds keys, sinks read it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Optional, Tuple

ProtocolTag = Literal["json", "http", "binary"]
TransportTag = Literal["TCP", "UDP"]
DeviceKind = Literal["physical", "virtual", "loopback", "npcap-loopback"]


# === Capture ===
@dataclass(frozen=True)
class CaptureDeviceDescriptor:
    """One capture source as enumerated by the capture collaborator."""
    name: str
    description: str
    kind: DeviceKind

    @property
    def label(self) -> str:
        return self.description or self.name


@dataclass(frozen=True)
class TransportSegment:
    """Transport payload and port pair handed to the detector chain."""
    payload: bytes
    src_port: int
    dst_port: int
    transport: TransportTag


@dataclass(frozen=True)
class RawFrame:
    """Decoded view of one captured frame; lives for one callback invocation."""
    ts: float
    length: int
    link_type: str
    payload: bytes = b""

    # L2
    src_mac: Optional[str] = None
    dst_mac: Optional[str] = None

    # L3
    network: Optional[str] = None        # "IPv4" | "IPv6"
    ip_version: Optional[int] = None
    ip_header_length: Optional[int] = None
    ttl: Optional[int] = None
    src_ip: Optional[str] = None
    dst_ip: Optional[str] = None

    # L4
    transport: Optional[str] = None      # "TCP" | "UDP" | "ICMP" | "ICMPv6"
    src_port: Optional[int] = None
    dst_port: Optional[int] = None
    tcp_flags: Optional[str] = None
    tcp_seq: Optional[int] = None
    tcp_ack: Optional[int] = None
    udp_length: Optional[int] = None

    def segment(self) -> Optional[TransportSegment]:
        """Return the TCP/UDP segment carried by this frame, if any."""
        if self.transport == "TCP":
            tag: TransportTag = "TCP"
        elif self.transport == "UDP":
            tag = "UDP"
        else:
            return None
        return TransportSegment(
            payload=self.payload,
            src_port=self.src_port or 0,
            dst_port=self.dst_port or 0,
            transport=tag,
        )


# === Detection ===
@dataclass
class DetectionRecord:
    """
    Structured output of the detector chain for one payload.

    `protocol` is assigned by the producing detector and cannot be changed
    afterwards. `fields` keeps insertion order; writing an existing key
    replaces its value in place.
    """
    protocol: ProtocolTag
    fields: Dict[str, str] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)
    detected_at: Optional[float] = None

    def __setattr__(self, name: str, value) -> None:
        if name == "protocol" and "protocol" in self.__dict__:
            raise AttributeError("protocol is set once by the producing detector")
        super().__setattr__(name, value)

    def set(self, key: str, value: str) -> None:
        self.fields[key] = value

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.fields.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self.fields.items())

    def as_dict(self) -> Dict[str, object]:
        """JSON-friendly view used by the HTTP API."""
        return {
            "protocol": self.protocol,
            "created_at": self.created_at,
            "detected_at": self.detected_at,
            "fields": dict(self.fields),
        }
