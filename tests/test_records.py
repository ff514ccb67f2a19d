import ipaddress
import struct

import pytest

from vflow.netflow5.records import (
    Decoder,
    FlowRecord,
    Message,
    NetflowError,
    PacketHeader,
)

HEADER_VALUES = (5, 1, 123456, 1_600_000_000, 250, 77, 1, 2, 0)


def _header(version=5, count=1):
    values = (version, count) + HEADER_VALUES[2:]
    return struct.pack(">HHIIIIBBH", *values)


def _flow_values(src_port=443):
    return (
        int(ipaddress.IPv4Address("192.0.2.10")),
        int(ipaddress.IPv4Address("198.51.100.20")),
        int(ipaddress.IPv4Address("203.0.113.1")),
        3,
        4,
        10,
        1500,
        1000,
        2000,
        src_port,
        53000,
        0,
        0x18,
        6,
        0,
        64500,
        64501,
        24,
        16,
        0,
    )


def _flow(src_port=443):
    return struct.pack(">IIIHHIIIIHHBBBBHHBBH", *_flow_values(src_port))


def test_flow_record_needs_48_bytes():
    message = Decoder("192.0.2.1", _header() + _flow()).decode()
    assert message.flows == [FlowRecord(*_flow_values())]
    with pytest.raises(NetflowError):
        Decoder("192.0.2.1", _header() + _flow()[:47]).decode()


def test_decode_single_flow_round_trip():
    message = Decoder("192.0.2.1", _header() + _flow()).decode()
    assert isinstance(message, Message)
    assert message.agent_id == "192.0.2.1"
    assert message.header == PacketHeader(*HEADER_VALUES)
    assert message.flows == [FlowRecord(*_flow_values())]


def test_decoded_addresses_match_input():
    flow = Decoder("192.0.2.1", _header() + _flow()).decode().flows[0]
    assert str(ipaddress.IPv4Address(flow.src_addr)) == "192.0.2.10"
    assert str(ipaddress.IPv4Address(flow.dst_addr)) == "198.51.100.20"
    assert flow.prot_type == 6


def test_decode_many_flows_in_order():
    ports = [1000 + n for n in range(30)]
    data = _header(count=30) + b"".join(_flow(p) for p in ports)
    message = Decoder("192.0.2.1", data).decode()
    assert [f.src_port for f in message.flows] == ports
    assert message.header.count == len(message.flows)


def test_agent_id_accepts_address_object():
    raddr = ipaddress.ip_address("2001:db8::5")
    message = Decoder(raddr, _header() + _flow()).decode()
    assert message.agent_id == "2001:db8::5"


def test_invalid_version_raises():
    with pytest.raises(NetflowError, match="invalid netflow version"):
        Decoder("192.0.2.1", _header(version=9) + _flow()).decode()


@pytest.mark.parametrize("count", [0, 31])
def test_flow_count_out_of_bounds(count):
    with pytest.raises(NetflowError, match="flow count out of bounds"):
        Decoder("192.0.2.1", _header(count=count) + _flow()).decode()


def test_missing_flow_bytes_raise():
    with pytest.raises(NetflowError, match="remaining bytes encountered"):
        Decoder("192.0.2.1", _header(count=2) + _flow()).decode()


def test_short_header_raises():
    with pytest.raises(NetflowError):
        Decoder("192.0.2.1", _header()[:10]).decode()


def test_empty_payload_raises():
    with pytest.raises(NetflowError):
        Decoder("192.0.2.1", b"").decode()


def test_trailing_bytes_are_ignored():
    message = Decoder("192.0.2.1", _header() + _flow() + b"\x00" * 7).decode()
    assert message.flows == [FlowRecord(*_flow_values())]