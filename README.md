# wiretap

`wiretap` captures Ethernet frames from a network interface and decodes them
layer by layer: Ethernet II, IPv4, and then TCP, UDP or ICMP. Each packet is
printed either as a compact summary or, in verbose mode, with every enabled
layer and a hex dump of its payload.

It needs no third-party libraries. Live capture uses Linux packet sockets, so
it runs on Linux only and needs the privileges to open one (root, or
`CAP_NET_RAW`). Only Ethernet and loopback interfaces are accepted.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Command line

```
wiretap [options] [filter]
```

| Option          | Meaning                                                          |
|-----------------|------------------------------------------------------------------|
| `-i <iface>`    | Interface to capture on (default: the first one other than `lo`) |
| `-f <filter>`   | Filter expression, e.g. `'tcp port 80'`                          |
| `-p <ports>`    | Comma-separated ports, e.g. `80,443,8080`                        |
| `-s <ip>`       | Keep only IP packets from this source address                    |
| `-d <ip>`       | Keep only IP packets to this destination address                 |
| `-t`            | Enable TCP packets                                               |
| `-u`            | Enable UDP packets                                               |
| `-c`            | Enable ICMP packets                                              |
| `-e`            | Enable non-IP Ethernet frames and the Ethernet layer in output   |
| `-H`            | Show human-readable strings found in payloads                    |
| `-v`            | Verbose output: every enabled layer plus payload dumps           |
| `-h`            | Show help                                                        |

A trailing argument is taken as the filter expression and replaces one given
with `-f`. Ports given with `-p` are added to it as `port A or port B ...`; if
a filter was also given, the two are combined as `(filter) and (ports)`.
Entries that are not ports from 1 to 65535 are ignored. An unknown option
prints the help text.

All protocols start disabled, so pass at least one of `-t`, `-u`, `-c` or
`-e`. IP packets whose protocol is not one of TCP, UDP or ICMP are never shown.

In verbose mode each enabled layer is printed with its payload: a hex dump of
up to 128 bytes, or with `-H` a hex dump plus the printable runs of up to 1024
bytes. The IPv4 layer is shown whenever any of TCP, UDP or ICMP is enabled.

Examples:

```
wiretap -i eth0 -t 'tcp port 80'
wiretap -t -p 22,80,443
wiretap -t -u -s 192.0.2.10 -d 198.51.100.53
wiretap -v -H -t -p 80
```

Press Ctrl+C (or send SIGTERM) to stop. The number of packets received and
dropped is printed on exit; in verbose mode the counters are also shown about
once a second while capturing.

### Filter expressions

Filters use a subset of the tcpdump syntax, evaluated in Python on each
decoded packet:

- protocols: `tcp`, `udp`, `icmp`, `ip`, `arp`, `ip6`
- `host <addr>`, `net <cidr>`, `port <number-or-service>`, each optionally
  preceded by `src` or `dst`, and optionally by a protocol (`tcp port 22`,
  `udp dst port domain`, `tcp src host 192.0.2.1`)
- a bare address is read as `host <addr>`
- `and` / `&&`, `or` / `||`, `not` / `!`, and parentheses

Only IPv4 addresses are understood. An invalid expression makes the command
report `Couldn't parse filter ...` and exit with status 1.

## Library use

Decoding a captured frame:

```python
from datetime import datetime

from wiretap.packet import Packet
from wiretap.ip import IPLayer
from wiretap.tcp import TCPLayer

packet = Packet.parse(frame_bytes, datetime.now())
print(packet)

ip = packet.get_layer(IPLayer)
tcp = packet.get_layer(TCPLayer)
if ip and tcp:
    print(ip.source_ip, tcp.source_port, "->", ip.dest_ip, tcp.dest_port)
```

`Packet.parse` also takes a POSIX timestamp as a number. Each layer can be
parsed on its own: `EthernetLayer.parse(data)` in `wiretap.ethernet`,
`IPLayer.parse(data)` in `wiretap.ip`, `TCPLayer.parse(data)` in
`wiretap.tcp`, `UDPLayer.parse(data)` in `wiretap.udp` and
`ICMPLayer.parse(data)` in `wiretap.icmp`. A truncated or malformed header
raises `wiretap.layer.PacketParseError`. Every layer has `header_size`,
`payload` and `payload_size`, and `str()` gives a multi-line description.

Filter expressions can be used on their own:

```python
from wiretap.filterexpr import compile_filter

expr = compile_filter("tcp and (port 80 or port 443)")
expr.matches(packet)
```

`compile_filter` raises `wiretap.filterexpr.FilterSyntaxError` for an invalid
expression; an empty one matches every packet.

Hex dumps:

```python
from wiretap.hexdump import hex_dump, format_human

print(hex_dump(b"GET / HTTP/1.1\r\n", True))
print(format_human(b"\x00\x01hello\x02world"))
```

Live capture:

```python
from wiretap.config import SnifferConfig
from wiretap.sniffer import PacketSniffer

config = SnifferConfig(interface="eth0", filter="udp port 53")

with PacketSniffer(config) as sniffer:
    sniffer.set_callback(print)
    ...

print(sniffer.stats())
```

`start()` raises `wiretap.sniffer.SnifferError` when the interface cannot be
opened. Packets must pass the filter expression and then the protocol,
address and port settings of `SnifferConfig` (see `PacketSniffer.accepts`)
before the callback is called. `stats()` returns a `SnifferStats` with the
number of packets that passed the filter expression and the number the kernel
dropped. Diagnostic messages go to the `wiretap.sniffer` logger.

`wiretap.sniffer.list_interfaces()` returns the names of the host's network
interfaces.

## Limitations

- Captured packets cannot be saved to or read from a capture file;
  `SnifferConfig.output_file` is not used.
- `max_packets`, `filter_ip`, `show_payload`, `show_hex` and `show_ascii` in
  `SnifferConfig` are accepted but have no effect.
- IPv6, ARP and VLAN frames are recognised by EtherType only; nothing above
  the Ethernet header is decoded for them.
- TCP options are kept as raw bytes and not decoded.
- Filters run in user space after each frame is received, not in the kernel.