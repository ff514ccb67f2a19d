"""Decoding of sFlow flow samples and the records they carry."""

from __future__ import annotations

import io
import ipaddress
from dataclasses import dataclass, field
from typing import BinaryIO, Dict

from vflow.packet.packet import Packet, decode_packet

SF_DATA_RAW_HEADER = 1
SF_DATA_EXT_SWITCH = 1001
SF_DATA_EXT_ROUTER = 1002

MAX_SAMPLED_HEADER_LEN = 1500


class SFlowError(Exception):
    """Raised when sFlow data cannot be decoded."""


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    data = stream.read(n)
    if len(data) < n:
        raise SFlowError("unexpected end of sflow data")
    return data


def _read_u32(stream: BinaryIO) -> int:
    return int.from_bytes(_read_exact(stream, 4), "big")


def _skip(stream: BinaryIO, n: int) -> None:
    stream.seek(n, io.SEEK_CUR)


@dataclass
class FlowSample:
    """One flow sample and its decoded records, keyed by record kind."""

    sequence_no: int = 0
    source_id: int = 0
    sampling_rate: int = 0
    sample_pool: int = 0
    drops: int = 0
    input: int = 0
    output: int = 0
    records_no: int = 0
    records: Dict[str, object] = field(default_factory=dict)

    def _unmarshal(self, stream: BinaryIO, expanded: bool) -> None:
        self.sequence_no = _read_u32(stream)
        if expanded:
            self.source_id = _read_u32(stream)
            _skip(stream, 4)
        else:
            self.source_id = _read_exact(stream, 1)[0]
            _skip(stream, 3)
        self.sampling_rate = _read_u32(stream)
        self.sample_pool = _read_u32(stream)
        self.drops = _read_u32(stream)
        if expanded:
            _skip(stream, 4)  # input interface format
        self.input = _read_u32(stream)
        if expanded:
            _skip(stream, 4)  # output interface format
        self.output = _read_u32(stream)
        self.records_no = _read_u32(stream)


@dataclass
class SampledHeader:
    """A raw sampled packet header as carried on the wire."""

    protocol: int = 0
    frame_length: int = 0
    stripped: int = 0
    header_length: int = 0
    header: bytes = b""

    @classmethod
    def _unmarshal(cls, stream: BinaryIO) -> "SampledHeader":
        protocol = _read_u32(stream)
        frame_length = _read_u32(stream)
        stripped = _read_u32(stream)
        header_length = _read_u32(stream)
        if header_length > MAX_SAMPLED_HEADER_LEN:
            raise SFlowError("the ethernet length is greater than 1500")

        # header bytes are padded up to a multiple of four
        total = header_length + (4 - header_length) % 4
        chunk = stream.read(total)
        if total and not chunk:
            raise SFlowError("unexpected end of sflow data")
        header = chunk.ljust(total, b"\x00")[:header_length]
        return cls(protocol, frame_length, stripped, header_length, header)


@dataclass
class ExtSwitchData:
    """Extended switch data: VLAN ids and priorities."""

    src_vlan: int = 0
    src_priority: int = 0
    dst_vlan: int = 0
    dst_priority: int = 0

    @classmethod
    def _unmarshal(cls, stream: BinaryIO) -> "ExtSwitchData":
        data = cls()
        data.src_vlan = _read_u32(stream)
        data.src_priority = _read_u32(stream)
        data.dst_vlan = _read_u32(stream)
        # the fourth word is stored as the source priority; destination priority stays 0
        data.src_priority = _read_u32(stream)
        return data


@dataclass
class ExtRouterData:
    """Extended router data: next hop and prefix masks."""

    next_hop: bytes = b""
    src_mask: int = 0
    dst_mask: int = 0

    @property
    def next_hop_address(self) -> str:
        """The next hop as a printable address."""
        if len(self.next_hop) in (4, 16):
            return str(ipaddress.ip_address(self.next_hop))
        return "?" + self.next_hop.hex()

    @classmethod
    def _unmarshal(cls, stream: BinaryIO, length: int) -> "ExtRouterData":
        if length < 8:
            raise SFlowError("extended router data length is too short")
        buff = _read_exact(stream, length - 8)
        next_hop = bytes(buff[4:])
        src_mask = _read_u32(stream)
        dst_mask = _read_u32(stream)
        return cls(next_hop, src_mask, dst_mask)


def decode_sampled_header(stream: BinaryIO) -> Packet:
    """Read a raw header record and decode the packet it holds."""
    header = SampledHeader._unmarshal(stream)
    return decode_packet(header.header, header.protocol)


def decode_ext_switch_data(stream: BinaryIO) -> ExtSwitchData:
    """Read an extended switch data record."""
    return ExtSwitchData._unmarshal(stream)


def decode_ext_router_data(stream: BinaryIO, length: int) -> ExtRouterData:
    """Read an extended router data record of ``length`` bytes."""
    return ExtRouterData._unmarshal(stream, length)


def decode_flow_sample(stream: BinaryIO, expanded: bool) -> FlowSample:
    """Decode a flow sample (compact or expanded) with its records."""
    sample = FlowSample()
    sample._unmarshal(stream, expanded)

    for _ in range(sample.records_no):
        record_format = _read_u32(stream)
        record_length = _read_u32(stream)
        if record_format == SF_DATA_RAW_HEADER:
            sample.records["RawHeader"] = decode_sampled_header(stream)
        elif record_format == SF_DATA_EXT_SWITCH:
            sample.records["ExtSwitch"] = decode_ext_switch_data(stream)
        elif record_format == SF_DATA_EXT_ROUTER:
            sample.records["ExtRouter"] = decode_ext_router_data(stream, record_length)
        else:
            _skip(stream, record_length)

    return sample