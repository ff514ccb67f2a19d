"""Decoding of sFlow version 5 datagrams."""

from __future__ import annotations

import ipaddress
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, Iterable, List, Tuple, Union

from vflow.sflow.flow_counter import CounterSample, decode_flow_counter
from vflow.sflow.flow_sample import (
    FlowSample,
    SFlowError,
    _read_exact,
    _read_u32,
    _skip,
    decode_flow_sample,
)

SFLOW_VERSION = 5
_AGENT_IPV6 = 2


class SampleType(IntEnum):
    """Standard sFlow sample formats."""

    FLOW_SAMPLE = 1
    COUNTER_SAMPLE = 2
    FLOW_SAMPLE_EXPANDED = 3
    COUNTER_SAMPLE_EXPANDED = 4


@dataclass
class SFDatagram:
    """An sFlow datagram header with its decoded samples and counters."""

    version: int = 0
    ip_version: int = 0
    agent_sub_id: int = 0
    sequence_no: int = 0
    sys_up_time: int = 0
    samples_no: int = 0
    samples: List[FlowSample] = field(default_factory=list)
    counters: List[CounterSample] = field(default_factory=list)
    ip_address: Union[ipaddress.IPv4Address, ipaddress.IPv6Address, None] = None
    col_time: int = 0


class SFDecoder:
    """Decodes one sFlow datagram from a seekable binary stream.

    Sample formats listed in ``filter`` are skipped without decoding.
    """

    def __init__(self, stream: BinaryIO, filter: Iterable[int] = ()) -> None:
        self._stream = stream
        self._filter = frozenset(filter)

    def decode(self) -> SFDatagram:
        """Decode the datagram header and every sample that follows it."""
        datagram = self.decode_header()
        stream = self._stream

        for _ in range(datagram.samples_no):
            sample_format, length = self.sample_info()
            if sample_format in self._filter:
                _skip(stream, length)
                continue

            if sample_format == SampleType.FLOW_SAMPLE:
                datagram.samples.append(decode_flow_sample(stream, False))
            elif sample_format == SampleType.COUNTER_SAMPLE:
                datagram.counters.append(decode_flow_counter(stream, False))
            elif sample_format == SampleType.FLOW_SAMPLE_EXPANDED:
                datagram.samples.append(decode_flow_sample(stream, True))
            elif sample_format == SampleType.COUNTER_SAMPLE_EXPANDED:
                datagram.counters.append(decode_flow_counter(stream, True))
            else:
                _skip(stream, length)

        return datagram

    def decode_header(self) -> SFDatagram:
        """Decode the datagram header; only version 5 is supported."""
        stream = self._stream
        datagram = SFDatagram()

        datagram.version = _read_u32(stream)
        if datagram.version != SFLOW_VERSION:
            raise SFlowError("the sflow version doesn't support")

        datagram.ip_version = _read_u32(stream)
        ip_len = 16 if datagram.ip_version == _AGENT_IPV6 else 4
        datagram.ip_address = ipaddress.ip_address(_read_exact(stream, ip_len))

        datagram.agent_sub_id = _read_u32(stream)
        datagram.sequence_no = _read_u32(stream)
        datagram.sys_up_time = _read_u32(stream)
        datagram.samples_no = _read_u32(stream)
        datagram.col_time = int(time.time())

        return datagram

    def sample_info(self) -> Tuple[int, int]:
        """Read a sample's format and data length.

        Only standard (enterprise 0) samples are supported.
        """
        sample_type = _read_u32(self._stream)
        enterprise = sample_type >> 12
        sample_format = sample_type & 0xFFF
        if enterprise != 0:
            raise SFlowError("the enterprise is not standard sflow data")

        try:
            length = _read_u32(self._stream)
        except SFlowError as exc:
            raise SFlowError("the sflow data length is unknown") from exc

        return sample_format, length