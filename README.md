# vflow

Decoders for network flow telemetry:

- sFlow v5 datagrams, with flow samples and counter samples in both the
  compact and the expanded formats (`vflow.sflow`);
- the Ethernet (with one 802.1Q VLAN tag), IPv4, IPv6, TCP, UDP and ICMP
  headers carried inside sFlow raw packet samples (`vflow.packet`);
- NetFlow v5 export packets, and their rendering as compact JSON
  (`vflow.netflow5`);
- a producer that forwards encoded messages, one per line, to a TCP or UDP
  endpoint (`vflow.producer`).

A small big-endian buffer reader, `vflow.reader.Reader`, is used by the
NetFlow decoder and can be used on its own.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Decoding sFlow

`SFDecoder` reads one datagram from a seekable binary stream. Sample formats
given in the filter are skipped without being decoded.

```python
import io
from vflow.sflow.datagram import SFDecoder, SampleType

with open("sample.sflow", "rb") as fh:
    payload = fh.read()

# Skip counter samples; decode only flow samples.
decoder = SFDecoder(io.BytesIO(payload), [SampleType.COUNTER_SAMPLE])
datagram = decoder.decode()

print(datagram.ip_address, datagram.sequence_no, datagram.sys_up_time)
for sample in datagram.samples:
    print(sample.sampling_rate, sorted(sample.records))
for counters in datagram.counters:
    print(counters.source_id_idx, sorted(counters.records))
```

Flow sample records are stored under the keys `"RawHeader"` (a decoded
`Packet`), `"ExtSwitch"` (`ExtSwitchData`) and `"ExtRouter"`
(`ExtRouterData`, whose `next_hop_address` gives the next hop as text).
Counter sample records are stored under `"GenInt"`, `"EthInt"`, `"TRInt"`,
`"VGInt"`, `"Vlan"` and `"Proc"`. Records of other formats are skipped.

Only version 5 datagrams and standard (enterprise 0) samples are accepted;
anything else, or a truncated datagram, raises
`vflow.sflow.flow_sample.SFlowError`.

## Decoding sampled packet headers directly

```python
from vflow.packet.packet import HeaderProtocol, decode_packet

packet = decode_packet(frame_bytes, HeaderProtocol.ETHERNET)
print(packet.l2.src_mac, packet.l2.vlan, packet.l3.src, packet.l4.dst_port)
```

`HeaderProtocol.IPV4` and `HeaderProtocol.IPV6` start decoding at the
network header. The layer functions `decode_ethernet`, `decode_ipv4_header`,
`decode_ipv6_header`, `decode_transport`, `decode_tcp`, `decode_udp` and
`decode_icmp` are available too. Malformed or unsupported input raises
`vflow.packet.transport.PacketError`.

## Decoding NetFlow v5

```python
from vflow.netflow5.records import Decoder
from vflow.netflow5.marshal import to_json

message = Decoder("192.0.2.1", payload).decode()
print(message.header.seq_num, len(message.flows))
print(to_json(message).decode())
```

The header must carry version 5 and a flow count between 1 and 30, and the
payload must hold that many 48-byte records; otherwise
`vflow.netflow5.records.NetflowError` is raised. `to_json` returns bytes,
with flow addresses written as dotted IPv4 text.

## Producing messages

```python
import logging
from vflow.producer.producer import new_producer

producer = new_producer("rawSocket")
producer.mq_config_file = "mq.conf"
producer.logger = logging.getLogger("vflow")
producer.topic = "vflow.netflow5"

# in one thread:
producer.run()

# elsewhere:
producer.chan.put(b'{"AgentID":"192.0.2.1"}')
producer.shutdown()
```

`run()` sets up the back end and sends every message put on `chan` until
`shutdown()` is called; failed writes are added to `mq_error_count`.
The raw socket back end reads `url` (default `localhost:9555`), `protocol`
(`tcp` or `udp`, default `tcp`) and `retry-max` (default 2) from a YAML
file; a missing or unreadable file is an error. Any object with `setup` and
`input_messages` methods, as described by `vflow.producer.producer.MQueue`,
can be passed to `Producer` directly.

## What this package does not do

- It has no command and no collector: it does not listen on UDP ports or run
  worker pools. Reading datagrams off the network is left to the caller.
- It decodes NetFlow v5 only; NetFlow v9 and IPFIX are not decoded, and there
  is no template cache.
- `new_producer` knows only the `rawSocket` back end; there are no Kafka,
  NSQ or NATS producers.
- It does not generate test traffic.