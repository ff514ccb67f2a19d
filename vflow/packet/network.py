"""Decoding of IPv4 and IPv6 headers and dispatch to the transport layer."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Union

from vflow.packet.transport import (
    ICMP,
    PacketError,
    TCPHeader,
    UDPHeader,
    decode_icmp,
    decode_tcp,
    decode_udp,
)

IPV4_HEADER_LEN = 20
IPV6_HEADER_LEN = 40

IANA_PROTO_ICMP = 1
IANA_PROTO_TCP = 6
IANA_PROTO_UDP = 17
IANA_PROTO_IPV6_ICMP = 58


@dataclass(frozen=True)
class IPv4Header:
    version: int
    tos: int
    total_len: int
    id: int
    flags: int
    frag_off: int
    ttl: int
    protocol: int
    checksum: int
    src: str
    dst: str


@dataclass(frozen=True)
class IPv6Header:
    version: int
    traffic_class: int
    flow_label: int
    payload_len: int
    next_header: int
    hop_limit: int
    src: str
    dst: str


Transport = Union[TCPHeader, UDPHeader, ICMP]


def _ip_string(raw: bytes) -> str:
    if len(raw) == 4:
        return str(ipaddress.IPv4Address(raw))
    addr = ipaddress.IPv6Address(raw)
    if addr.ipv4_mapped is not None:
        return str(addr.ipv4_mapped)
    return str(addr)


def decode_ipv4_header(data: bytes) -> tuple[IPv4Header, bytes]:
    """Decode a fixed-size IPv4 header; returns it and the bytes after it."""
    if len(data) < IPV4_HEADER_LEN:
        raise PacketError("short ipv4 header length")
    header = IPv4Header(
        version=(data[0] & 0xF0) >> 4,
        tos=data[1],
        total_len=int.from_bytes(data[2:4], "big"),
        id=int.from_bytes(data[4:6], "big"),
        flags=data[6] & 0x07,
        frag_off=0,
        ttl=data[8],
        protocol=data[9],
        checksum=int.from_bytes(data[10:12], "big"),
        src=_ip_string(bytes(data[12:16])),
        dst=_ip_string(bytes(data[16:20])),
    )
    return header, bytes(data[IPV4_HEADER_LEN:])


def decode_ipv6_header(data: bytes) -> tuple[IPv6Header, bytes]:
    """Decode an IPv6 header; returns it and the bytes after it."""
    if len(data) < IPV6_HEADER_LEN:
        raise PacketError("short ipv6 header length")
    header = IPv6Header(
        version=data[0] >> 4,
        traffic_class=(data[0] & 0x0F) << 4 | data[1] >> 4,
        flow_label=(data[1] & 0x0F) << 16 | data[2] << 8 | data[3],
        payload_len=int.from_bytes(data[4:6], "big"),
        next_header=data[6],
        hop_limit=data[7],
        src=_ip_string(bytes(data[8:24])),
        dst=_ip_string(bytes(data[24:40])),
    )
    return header, bytes(data[IPV6_HEADER_LEN:])


def decode_transport(l3: object, data: bytes) -> tuple[Transport, bytes]:
    """Decode the transport header named by the network header ``l3``."""
    if isinstance(l3, IPv4Header):
        proto = l3.protocol
    elif isinstance(l3, IPv6Header):
        proto = l3.next_header
    else:
        raise PacketError("unknown network layer protocol")

    l4: Transport
    if proto in (IANA_PROTO_ICMP, IANA_PROTO_IPV6_ICMP):
        l4, consumed = decode_icmp(data), 4
    elif proto == IANA_PROTO_TCP:
        l4, consumed = decode_tcp(data), 20
    elif proto == IANA_PROTO_UDP:
        l4, consumed = decode_udp(data), 8
    else:
        raise PacketError("unknown transport layer")

    return l4, bytes(data[consumed:])