"""Decoding of transport layer headers: TCP, UDP and ICMP."""

from __future__ import annotations

from dataclasses import dataclass


class PacketError(Exception):
    """Raised when a sampled packet header cannot be decoded."""


@dataclass(frozen=True)
class TCPHeader:
    src_port: int
    dst_port: int
    data_offset: int
    reserved: int
    flags: int


@dataclass(frozen=True)
class UDPHeader:
    src_port: int
    dst_port: int


@dataclass(frozen=True)
class ICMP:
    type: int
    code: int
    rest_header: bytes


def decode_tcp(data: bytes) -> TCPHeader:
    """Decode a TCP header from the first 20 bytes of ``data``."""
    if len(data) < 20:
        raise PacketError("short TCP header length")
    return TCPHeader(
        src_port=int.from_bytes(data[0:2], "big"),
        dst_port=int.from_bytes(data[2:4], "big"),
        data_offset=data[12] >> 4,
        reserved=0,
        flags=int.from_bytes(data[12:14], "big") & 0x01FF,
    )


def decode_udp(data: bytes) -> UDPHeader:
    """Decode a UDP header from the first 8 bytes of ``data``."""
    if len(data) < 8:
        raise PacketError("short UDP header length")
    return UDPHeader(
        src_port=int.from_bytes(data[0:2], "big"),
        dst_port=int.from_bytes(data[2:4], "big"),
    )


def decode_icmp(data: bytes) -> ICMP:
    """Decode an ICMP header; everything past the checksum is kept as the rest."""
    if len(data) < 5:
        raise PacketError("ICMP header length is too short")
    return ICMP(type=data[0], code=data[1], rest_header=bytes(data[4:]))