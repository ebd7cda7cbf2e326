"""Helpers building real link-layer frames with dpkt for tests."""

import socket

import dpkt

MAC_A = b"\x00\x11\x22\x33\x44\x55"
MAC_B = b"\x66\x77\x88\x99\xaa\xbb"


def tcp_frame(payload: bytes, sport: int = 51000, dport: int = 80,
              src: str = "10.0.0.1", dst: str = "10.0.0.2",
              flags: int = dpkt.tcp.TH_ACK | dpkt.tcp.TH_PUSH) -> bytes:
    tcp = dpkt.tcp.TCP(sport=sport, dport=dport, seq=1000, ack=2000, flags=flags, data=payload)
    ip = dpkt.ip.IP(
        src=socket.inet_aton(src),
        dst=socket.inet_aton(dst),
        p=dpkt.ip.IP_PROTO_TCP,
        ttl=64,
        data=tcp,
    )
    eth = dpkt.ethernet.Ethernet(src=MAC_A, dst=MAC_B, type=dpkt.ethernet.ETH_TYPE_IP, data=ip)
    return bytes(eth)


def udp6_packet(payload: bytes, sport: int = 5353, dport: int = 53,
                src: str = "fe80::1", dst: str = "fe80::2") -> bytes:
    """Raw IPv6/UDP packet (no link layer)."""
    udp = dpkt.udp.UDP(sport=sport, dport=dport, ulen=8 + len(payload), data=payload)
    ip6 = dpkt.ip6.IP6(
        src=socket.inet_pton(socket.AF_INET6, src),
        dst=socket.inet_pton(socket.AF_INET6, dst),
        nxt=dpkt.ip.IP_PROTO_UDP,
        hlim=32,
        plen=len(bytes(udp)),
        data=udp,
    )
    return bytes(ip6)


def icmp_frame() -> bytes:
    icmp = dpkt.icmp.ICMP(type=8, code=0, data=dpkt.icmp.ICMP.Echo(id=1, seq=1, data=b"ping"))
    ip = dpkt.ip.IP(
        src=socket.inet_aton("10.0.0.1"),
        dst=socket.inet_aton("10.0.0.2"),
        p=dpkt.ip.IP_PROTO_ICMP,
        data=icmp,
    )
    eth = dpkt.ethernet.Ethernet(src=MAC_A, dst=MAC_B, type=dpkt.ethernet.ETH_TYPE_IP, data=ip)
    return bytes(eth)


def non_ip_frame() -> bytes:
    # Local experimental ethertype; dpkt leaves the body as bytes
    eth = dpkt.ethernet.Ethernet(src=MAC_A, dst=MAC_B, type=0x88B5, data=b"\x01\x02\x03\x04" * 12)
    return bytes(eth)
