"""Decoding of NetFlow version 5 export packets."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from typing import List, Union

from vflow.reader import ReadError, Reader

NETFLOW_VERSION = 5
MIN_FLOW_COUNT = 1
MAX_FLOW_COUNT = 30

_HEADER_FORMAT = struct.Struct(">HHIIIIBBH")
_FLOW_FORMAT = struct.Struct(">IIIHHIIIIHHBBBBHHBBH")

FLOW_RECORD_LEN = _FLOW_FORMAT.size


class NetflowError(Exception):
    """Raised when a NetFlow v5 packet cannot be decoded."""


@dataclass(frozen=True)
class PacketHeader:
    """NetFlow v5 packet header (24 bytes)."""

    version: int
    count: int
    sys_up_time_msecs: int
    unix_secs: int
    unix_nsecs: int
    seq_num: int
    eng_type: int
    eng_id: int
    smp_int: int

    def validate(self) -> None:
        """Check the version and the flow count."""
        if self.version != NETFLOW_VERSION:
            raise NetflowError(
                f"invalid netflow version, (expected: 5) (received: {self.version})"
            )
        if not MIN_FLOW_COUNT <= self.count <= MAX_FLOW_COUNT:
            raise NetflowError(
                "flow count out of bounds, (expected: [1...30]) "
                f"(received: {self.count})"
            )


@dataclass(frozen=True)
class FlowRecord:
    """NetFlow v5 flow record (48 bytes); addresses are 32-bit integers."""

    src_addr: int
    dst_addr: int
    next_hop: int
    input: int
    output: int
    pkt_count: int
    l3_octets: int
    start_time: int
    end_time: int
    src_port: int
    dst_port: int
    padding1: int
    tcp_flags: int
    prot_type: int
    tos: int
    src_as_num: int
    dst_as_num: int
    src_mask: int
    dst_mask: int
    padding2: int


@dataclass
class Message:
    """A decoded NetFlow v5 export packet."""

    agent_id: str
    header: PacketHeader
    flows: List[FlowRecord] = field(default_factory=list)


class Decoder:
    """Decodes a NetFlow v5 payload received from ``raddr``."""

    def __init__(
        self,
        raddr: Union[str, bytes, ipaddress.IPv4Address, ipaddress.IPv6Address],
        data: bytes,
    ) -> None:
        self._raddr = ipaddress.ip_address(raddr)
        self._reader = Reader(data)

    def decode(self) -> Message:
        """Decode the header and every flow record it announces."""
        try:
            raw = self._reader.read(_HEADER_FORMAT.size)
        except ReadError as exc:
            raise NetflowError(str(exc)) from exc

        header = PacketHeader(*_HEADER_FORMAT.unpack(raw))
        header.validate()

        message = Message(agent_id=str(self._raddr), header=header)
        message.flows.extend(self._decode_flows(header.count))
        return message

    def _decode_flows(self, count: int) -> List[FlowRecord]:
        remaining = len(self._reader)
        expected = count * FLOW_RECORD_LEN
        if expected > remaining:
            raise NetflowError(
                f"Expect {expected} bytes to read, "
                f"{remaining} remaining bytes encountered"
            )
        return [
            FlowRecord(*_FLOW_FORMAT.unpack(self._reader.read(FLOW_RECORD_LEN)))
            for _ in range(count)
        ]