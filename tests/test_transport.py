import pytest

from vflow.packet.transport import (
    ICMP,
    PacketError,
    decode_icmp,
    decode_tcp,
    decode_udp,
)


def test_decode_udp():
    b = bytes([0xA3, 0x6C, 0x0, 0x35, 0x0, 0x3D, 0xC8, 0xDC, 0x81, 0x9F])
    udp = decode_udp(b)
    assert udp.src_port == 41836
    assert udp.dst_port == 53


def test_decode_tcp():
    b = bytes([
        0xA5, 0x8E, 0x20, 0xFB, 0x54,
        0x1, 0x4F, 0x1C, 0x52, 0x7F,
        0x0, 0xF9, 0x50, 0x10, 0x1,
        0x2A, 0xBB, 0xDE, 0x0, 0x0,
    ])
    tcp = decode_tcp(b)
    assert tcp.src_port == 42382
    assert tcp.dst_port == 8443
    assert tcp.flags == 16
    assert tcp.reserved == 0


def test_decode_tcp_ns_flag():
    b = bytes([
        0xA5, 0x8E, 0x20, 0xFB, 0x54,
        0x1, 0x4F, 0x1C, 0x52, 0x7F,
        0x0, 0xF9, 0x51, 0x10, 0x1,
        0x2A, 0xBB, 0xDE, 0x0, 0x0,
    ])
    tcp = decode_tcp(b)
    assert tcp.flags == 272
    assert tcp.data_offset == 5


def test_short_tcp():
    with pytest.raises(PacketError, match="short TCP header length"):
        decode_tcp(bytes(19))


def test_short_udp():
    with pytest.raises(PacketError, match="short UDP header length"):
        decode_udp(bytes(7))


def test_decode_icmp():
    icmp = decode_icmp(bytes([0x08, 0x00, 0x63, 0x3A, 0x8F, 0x44]))
    assert icmp == ICMP(type=8, code=0, rest_header=bytes([0x8F, 0x44]))


def test_short_icmp():
    with pytest.raises(PacketError, match="ICMP header length is too short"):
        decode_icmp(bytes(4))