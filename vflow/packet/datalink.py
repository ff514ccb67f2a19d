"""Decoding of the layer two (IEEE 802.3 / 802.1Q) header."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum

from vflow.packet.transport import PacketError

ETHERNET_HEADER_LEN = 14


class EtherType(IntEnum):
    ARP = 0x0806
    IPV4 = 0x0800
    IPV6 = 0x86DD
    LACP = 0x8809
    IEEE8021Q = 0x8100


@dataclass(frozen=True)
class Datalink:
    src_mac: str = ""
    dst_mac: str = ""
    vlan: int = 0
    ether_type: int = 0


def _mac(raw: bytes) -> str:
    return ":".join(f"{octet:02x}" for octet in raw)


def decode_ieee802(data: bytes) -> Datalink:
    """Decode MAC addresses and ether type; addresses stay empty for a VLAN tag."""
    if len(data) < ETHERNET_HEADER_LEN:
        raise PacketError("short ethernet header length")
    ether_type = int.from_bytes(data[12:14], "big")
    if ether_type == EtherType.IEEE8021Q:
        return Datalink(ether_type=ether_type)
    return Datalink(
        src_mac=_mac(data[6:12]),
        dst_mac=_mac(data[0:6]),
        ether_type=ether_type,
    )


def decode_ethernet(data: bytes) -> tuple[Datalink, bytes]:
    """Decode the ethernet header, stripping one 802.1Q tag if present.

    Returns the datalink header and the bytes that follow it.
    """
    if len(data) < ETHERNET_HEADER_LEN:
        raise PacketError("the ethernet header is too small")

    link = decode_ieee802(data)
    if link.ether_type == EtherType.IEEE8021Q:
        if len(data) < ETHERNET_HEADER_LEN + 4:
            raise PacketError("the ethernet header is too small")
        vlan = int.from_bytes(data[14:16], "big")
        data = bytes(data[:12]) + bytes(data[16:])
        link = dataclasses.replace(decode_ieee802(data), vlan=vlan)

    return link, bytes(data[ETHERNET_HEADER_LEN:])