"""Decoding of sampled packet headers into their layer 2, 3 and 4 parts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Union

from vflow.packet.datalink import Datalink, EtherType, decode_ethernet
from vflow.packet.network import (
    IPv4Header,
    IPv6Header,
    Transport,
    decode_ipv4_header,
    decode_ipv6_header,
    decode_transport,
)
from vflow.packet.transport import PacketError


class HeaderProtocol(IntEnum):
    """Format of a sampled header as given by sFlow."""

    ETHERNET = 1
    IPV4 = 11
    IPV6 = 12


@dataclass
class Packet:
    """Decoded layers of one sampled packet."""

    l2: Datalink = field(default_factory=Datalink)
    l3: Optional[Union[IPv4Header, IPv6Header]] = None
    l4: Optional[Transport] = None


def _decode_network(packet: Packet, data: bytes, ipv6: bool) -> None:
    header, rest = decode_ipv6_header(data) if ipv6 else decode_ipv4_header(data)
    packet.l3 = header
    packet.l4, _ = decode_transport(header, rest)


def decode_packet(data: bytes, protocol: int) -> Packet:
    """Decode ``data`` whose outermost header is described by ``protocol``."""
    packet = Packet()

    if protocol == HeaderProtocol.ETHERNET:
        packet.l2, rest = decode_ethernet(data)
        if packet.l2.ether_type == EtherType.IPV4:
            _decode_network(packet, rest, ipv6=False)
        elif packet.l2.ether_type == EtherType.IPV6:
            _decode_network(packet, rest, ipv6=True)
        else:
            raise PacketError("unknown ether type")
    elif protocol == HeaderProtocol.IPV4:
        _decode_network(packet, data, ipv6=False)
    elif protocol == HeaderProtocol.IPV6:
        _decode_network(packet, data, ipv6=True)
    else:
        raise PacketError("unknown header protocol")

    return packet