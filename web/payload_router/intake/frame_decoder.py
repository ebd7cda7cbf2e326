"""
Frame decoder: turns raw link-layer bytes into a RawFrame.

- L2: Ethernet (802.1Q tags are unwrapped by dpkt), BSD loopback (DLT_NULL),
  Linux cooked capture (SLL) and raw IP.
- L3: IPv4 and IPv6. Non-IP frames still yield a RawFrame with only the
  link-layer fields filled in.
- L4: TCP and UDP carry payload + ports; ICMP is tagged but has no segment.

IP fragments are not reassembled: a non-first fragment has no parsed
transport header and therefore no segment.
"""

from __future__ import annotations

import socket
from typing import Dict, Optional

import dpkt  # type: ignore

from ..dto import RawFrame

LINK_ETHERNET = "ethernet"
LINK_LOOPBACK = "loopback"
LINK_LINUX_SLL = "linux_sll"
LINK_RAW = "raw"

_TCP_FLAG_NAMES = (
    (dpkt.tcp.TH_FIN, "FIN"),
    (dpkt.tcp.TH_SYN, "SYN"),
    (dpkt.tcp.TH_RST, "RST"),
    (dpkt.tcp.TH_PUSH, "PSH"),
    (dpkt.tcp.TH_ACK, "ACK"),
    (dpkt.tcp.TH_URG, "URG"),
    (dpkt.tcp.TH_ECE, "ECE"),
    (dpkt.tcp.TH_CWR, "CWR"),
)


def decode_frame(ts: float, buf: bytes, link_type: str = LINK_ETHERNET) -> Optional[RawFrame]:
    """
    Decode one captured frame.

    Parameters
    ----------
    ts : float
        Capture timestamp (epoch seconds).
    buf : bytes
        Raw frame bytes starting at the link layer named by `link_type`.
    link_type : str
        One of "ethernet", "loopback", "linux_sll", "raw".

    Returns
    -------
    RawFrame or None
        None when the link layer itself cannot be parsed.
    """
    info: Dict[str, object] = {}
    try:
        l3 = _unwrap_link(buf, link_type, info)
    except (dpkt.UnpackError, ValueError, IndexError):
        return None

    if isinstance(l3, dpkt.ip.IP):
        _fill_ipv4(l3, info)
    elif isinstance(l3, dpkt.ip6.IP6):
        _fill_ipv6(l3, info)

    return RawFrame(ts=float(ts), length=len(buf), link_type=link_type, **info)  # type: ignore[arg-type]


# === Link layer ===


def _unwrap_link(buf: bytes, link_type: str, info: Dict[str, object]):
    if link_type == LINK_ETHERNET:
        eth = dpkt.ethernet.Ethernet(buf)
        info["src_mac"] = _mac(eth.src)
        info["dst_mac"] = _mac(eth.dst)
        return eth.data
    if link_type == LINK_LOOPBACK:
        return dpkt.loopback.Loopback(buf).data
    if link_type == LINK_LINUX_SLL:
        return dpkt.sll.SLL(buf).data
    if link_type == LINK_RAW:
        return _raw_ip(buf)
    raise ValueError(f"Unsupported link type: {link_type}")


def _raw_ip(buf: bytes):
    if not buf:
        raise ValueError("empty frame")
    version = buf[0] >> 4
    if version == 4:
        return dpkt.ip.IP(buf)
    if version == 6:
        return dpkt.ip6.IP6(buf)
    return buf


def _mac(addr: bytes) -> str:
    return ":".join(f"{b:02x}" for b in addr)


# === Network layer ===


def _fill_ipv4(ip, info: Dict[str, object]) -> None:
    info["network"] = "IPv4"
    info["ip_version"] = 4
    info["ip_header_length"] = int(ip.hl) * 4
    info["ttl"] = int(ip.ttl)
    info["src_ip"] = socket.inet_ntop(socket.AF_INET, ip.src)
    info["dst_ip"] = socket.inet_ntop(socket.AF_INET, ip.dst)
    _fill_transport(ip.data, info)


def _fill_ipv6(ip6, info: Dict[str, object]) -> None:
    info["network"] = "IPv6"
    info["ip_version"] = 6
    info["ip_header_length"] = 40
    info["ttl"] = int(ip6.hlim)
    info["src_ip"] = socket.inet_ntop(socket.AF_INET6, ip6.src)
    info["dst_ip"] = socket.inet_ntop(socket.AF_INET6, ip6.dst)
    _fill_transport(ip6.data, info)


# === Transport layer ===


def _fill_transport(l4, info: Dict[str, object]) -> None:
    if isinstance(l4, dpkt.tcp.TCP):
        info["transport"] = "TCP"
        info["src_port"] = int(l4.sport)
        info["dst_port"] = int(l4.dport)
        info["tcp_flags"] = tcp_flags_text(int(l4.flags))
        info["tcp_seq"] = int(l4.seq)
        info["tcp_ack"] = int(l4.ack)
        info["payload"] = bytes(l4.data)
    elif isinstance(l4, dpkt.udp.UDP):
        info["transport"] = "UDP"
        info["src_port"] = int(l4.sport)
        info["dst_port"] = int(l4.dport)
        info["udp_length"] = int(l4.ulen)
        info["payload"] = bytes(l4.data)
    elif isinstance(l4, dpkt.icmp.ICMP):
        info["transport"] = "ICMP"
    elif isinstance(l4, dpkt.icmp6.ICMP6):
        info["transport"] = "ICMPv6"


def tcp_flags_text(flags: int) -> str:
    """Render a TCP flag bitmask as e.g. "SYN,ACK"."""
    return ",".join(name for bit, name in _TCP_FLAG_NAMES if flags & bit)
