"""Decoding of sFlow counter samples and their counter records."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Dict, Type, TypeVar

from vflow.sflow.flow_sample import _read_exact, _read_u32, _skip

SF_GENERIC_INTERFACE_COUNTERS = 1
SF_ETHERNET_INTERFACE_COUNTERS = 2
SF_TOKEN_RING_INTERFACE_COUNTERS = 3
SF_100BASEVG_INTERFACE_COUNTERS = 4
SF_VLAN_COUNTERS = 5
SF_PROCESSOR_COUNTERS = 1001

_C = TypeVar("_C", bound="_Counters")


class _Counters:
    _FORMAT: ClassVar[str]

    @classmethod
    def _unmarshal(cls: Type[_C], stream: BinaryIO) -> _C:
        raw = _read_exact(stream, struct.calcsize(cls._FORMAT))
        return cls(*struct.unpack(cls._FORMAT, raw))


@dataclass
class GenericInterfaceCounters(_Counters):
    """Generic interface counters (RFC 2233)."""

    _FORMAT: ClassVar[str] = ">IIQIIQIIIIIIQIIIIII"

    index: int
    type: int
    speed: int
    direction: int
    status: int
    in_octets: int
    in_unicast_packets: int
    in_multicast_packets: int
    in_broadcast_packets: int
    in_discards: int
    in_errors: int
    in_unknown_protocols: int
    out_octets: int
    out_unicast_packets: int
    out_multicast_packets: int
    out_broadcast_packets: int
    out_discards: int
    out_errors: int
    promiscuous_mode: int


@dataclass
class EthernetInterfaceCounters(_Counters):
    """Ethernet interface counters (RFC 2358)."""

    _FORMAT: ClassVar[str] = ">" + "I" * 13

    alignment_errors: int
    fcs_errors: int
    single_collision_frames: int
    multiple_collision_frames: int
    sqe_test_errors: int
    deferred_transmissions: int
    late_collisions: int
    excessive_collisions: int
    internal_mac_transmit_errors: int
    carrier_sense_errors: int
    frame_too_longs: int
    internal_mac_receive_errors: int
    symbol_errors: int


@dataclass
class TokenRingCounters(_Counters):
    """Token ring counters (RFC 1748)."""

    _FORMAT: ClassVar[str] = ">" + "I" * 18

    line_errors: int
    burst_errors: int
    ac_errors: int
    abort_trans_errors: int
    internal_errors: int
    lost_frame_errors: int
    receive_congestions: int
    frame_copied_errors: int
    token_errors: int
    soft_errors: int
    hard_errors: int
    signal_loss: int
    transmit_beacons: int
    recoverys: int
    lobe_wires: int
    removes: int
    singles: int
    freq_errors: int


@dataclass
class VGCounters(_Counters):
    """100 BaseVG interface counters (RFC 2020)."""

    _FORMAT: ClassVar[str] = ">IQIQIIIIIQIQQQ"

    in_high_priority_frames: int
    in_high_priority_octets: int
    in_norm_priority_frames: int
    in_norm_priority_octets: int
    in_ipm_errors: int
    in_oversize_frame_errors: int
    in_data_errors: int
    in_null_addressed_frames: int
    out_high_priority_frames: int
    out_high_priority_octets: int
    transition_into_trainings: int
    hc_in_high_priority_octets: int
    hc_in_norm_priority_octets: int
    hc_out_high_priority_octets: int


@dataclass
class VlanCounters(_Counters):
    """VLAN counters."""

    _FORMAT: ClassVar[str] = ">IQIIII"

    id: int
    octets: int
    unicast_packets: int
    multicast_packets: int
    broadcast_packets: int
    discards: int


@dataclass
class ProcessorCounters(_Counters):
    """Processor load and memory."""

    _FORMAT: ClassVar[str] = ">IIIQQ"

    cpu_5s: int
    cpu_1m: int
    cpu_5m: int
    total_memory: int
    free_memory: int


_RECORD_KINDS: Dict[int, tuple] = {
    SF_GENERIC_INTERFACE_COUNTERS: ("GenInt", GenericInterfaceCounters),
    SF_ETHERNET_INTERFACE_COUNTERS: ("EthInt", EthernetInterfaceCounters),
    SF_TOKEN_RING_INTERFACE_COUNTERS: ("TRInt", TokenRingCounters),
    SF_100BASEVG_INTERFACE_COUNTERS: ("VGInt", VGCounters),
    SF_VLAN_COUNTERS: ("Vlan", VlanCounters),
    SF_PROCESSOR_COUNTERS: ("Proc", ProcessorCounters),
}


@dataclass
class CounterSample:
    """Periodic counter polling of one data source."""

    sequence_no: int = 0
    source_id_type: int = 0
    source_id_idx: int = 0
    records_no: int = 0
    records: Dict[str, object] = field(default_factory=dict)

    def _unmarshal(self, stream: BinaryIO, expanded: bool) -> None:
        self.sequence_no = _read_u32(stream)
        if expanded:
            self.source_id_type = _read_u32(stream)
            self.source_id_idx = _read_u32(stream)
        else:
            self.source_id_type = _read_exact(stream, 1)[0]
            self.source_id_idx = int.from_bytes(_read_exact(stream, 3), "big")
        self.records_no = _read_u32(stream)


def decode_flow_counter(stream: BinaryIO, expanded: bool) -> CounterSample:
    """Decode a counter sample (compact or expanded) with its records."""
    sample = CounterSample()
    sample._unmarshal(stream, expanded)

    for _ in range(sample.records_no):
        record_format = _read_u32(stream)
        record_length = _read_u32(stream)
        kind = _RECORD_KINDS.get(record_format)
        if kind is None:
            _skip(stream, record_length)
            continue
        key, counters_cls = kind
        sample.records[key] = counters_cls._unmarshal(stream)

    return sample