"""JSON encoding of decoded NetFlow v5 messages."""

from __future__ import annotations

import ipaddress
from typing import Iterable, Tuple

from vflow.netflow5.records import FlowRecord, Message

_HEADER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("Version", "version"),
    ("Count", "count"),
    ("SysUpTimeMSecs", "sys_up_time_msecs"),
    ("UNIXSecs", "unix_secs"),
    ("UNIXNSecs", "unix_nsecs"),
    ("SeqNum", "seq_num"),
    ("EngType", "eng_type"),
    ("EngID", "eng_id"),
    ("SmpInt", "smp_int"),
)

_FLOW_ADDRESS_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("SrcAddr", "src_addr"),
    ("DstAddr", "dst_addr"),
    ("NextHop", "next_hop"),
)

_FLOW_NUMBER_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("Input", "input"),
    ("Output", "output"),
    ("PktCount", "pkt_count"),
    ("L3Octets", "l3_octets"),
    ("StartTime", "start_time"),
    ("EndTime", "end_time"),
    ("SrcPort", "src_port"),
    ("DstPort", "dst_port"),
    ("Padding1", "padding1"),
    ("TCPFlags", "tcp_flags"),
    ("ProtType", "prot_type"),
    ("Tos", "tos"),
    ("SrcAsNum", "src_as_num"),
    ("DstAsNum", "dst_as_num"),
    ("SrcMask", "src_mask"),
    ("DstMask", "dst_mask"),
    ("Padding2", "padding2"),
)


def _numbers(obj: object, fields: Iterable[Tuple[str, str]]) -> Iterable[str]:
    return (f'"{key}":{int(getattr(obj, attr))}' for key, attr in fields)


def _encode_header(message: Message) -> str:
    return '"Header":{' + ",".join(_numbers(message.header, _HEADER_FIELDS)) + "}"


def _encode_flow(flow: FlowRecord) -> str:
    addresses = (
        f'"{key}":"{ipaddress.IPv4Address(getattr(flow, attr))}"'
        for key, attr in _FLOW_ADDRESS_FIELDS
    )
    return "{" + ",".join([*addresses, *_numbers(flow, _FLOW_NUMBER_FIELDS)]) + "}"


def _encode_flows(message: Message) -> str:
    return '"Flows":[' + ",".join(_encode_flow(f) for f in message.flows) + "]"


def to_json(message: Message) -> bytes:
    """Encode a NetFlow v5 message as compact JSON bytes."""
    text = (
        '{"AgentID":"'
        + message.agent_id
        + '",'
        + _encode_header(message)
        + ","
        + _encode_flows(message)
        + "}"
    )
    return text.encode()