"""Command-line front end: capture packets and print them."""

from __future__ import annotations

import getopt
import re
import signal
import sys
import threading
from datetime import datetime

from .config import SnifferConfig
from .ethernet import EthernetLayer
from .filterexpr import FilterSyntaxError
from .hexdump import format_human, hex_dump
from .icmp import ICMPLayer
from .ip import IPLayer
from .layer import Layer
from .packet import Packet
from .sniffer import PacketSniffer, SnifferError
from .tcp import TCPLayer
from .udp import UDPLayer

PROGRAM_NAME = "wiretap"

_OPTIONS = "i:f:p:s:d:tucevhH"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_MAX_PORT = 0xFFFF
_HEX_LIMIT = 128
_HUMAN_LIMIT = 1024
_TICK = 0.1
_STATS_EVERY = 10


def usage(program_name: str) -> str:
    """Return the help text for the command."""
    return (
        f"Usage: {program_name} [options] [filter]\n"
        "Options:\n"
        "  -i <interface>  Network interface to capture on (default: auto-detect)\n"
        "  -f <filter>     BPF filter expression (e.g., 'tcp port 80')\n"
        "  -p <ports>      Comma-separated list of ports to filter (e.g., '80,443,8080')\n"
        "  -s <ip>         Filter by source IP address\n"
        "  -d <ip>         Filter by destination IP address\n"
        "  -t              Toggle TCP packets \n"
        "  -u              Toggle UDP packets \n"
        "  -c              Toggle ICMP packets \n"
        "  -e              Toggle Ethernet frames \n"
        "  -H              Show human-readable strings in payload\n"
        "  -v              Verbose output\n"
        "  -h              Show this help message\n"
        "\nExamples:\n"
        f"  {program_name} -i eth0 'tcp port 80'\n"
        f"  {program_name} -p 22,80,443\n"
        f"  {program_name} -s 192.168.1.1 -d 8.8.8.8\n"
        f"  {program_name} -H -p 80     # Show human-readable strings in HTTP traffic\n"
    )


def parse_ports(text: str) -> list[int]:
    """Parse a comma-separated port list, skipping entries that are not valid ports."""
    ports = []
    for item in text.split(","):
        match = _LEADING_INT.match(item)
        if match is None:
            continue
        port = int(match.group(1))
        if 0 < port <= _MAX_PORT:
            ports.append(port)
    return ports


def build_filter(expression: str, ports: list[int]) -> str:
    """Combine a filter expression with a port list into one expression."""
    if not ports:
        return expression
    port_filter = " or ".join(f"port {port}" for port in ports)
    if not expression:
        return port_filter
    return f"({expression}) and ({port_filter})"


def _layer_enabled(layer: Layer, config: SnifferConfig) -> bool:
    if isinstance(layer, TCPLayer):
        return config.filter_tcp
    if isinstance(layer, UDPLayer):
        return config.filter_udp
    if isinstance(layer, ICMPLayer):
        return config.filter_icmp
    if isinstance(layer, IPLayer):
        return config.filter_tcp or config.filter_udp or config.filter_icmp
    if isinstance(layer, EthernetLayer):
        return config.filter_ethernet
    return False


def _describe_payload(layer: Layer, config: SnifferConfig) -> str:
    size = layer.payload_size
    if size <= 0:
        return "No payload in this layer\n"
    text = f"Payload ({size} bytes):\n"
    if config.human_readable:
        text += format_human(layer.payload[:min(size, _HUMAN_LIMIT)])
    else:
        text += hex_dump(layer.payload[:min(size, _HEX_LIMIT)], True)
    return text + "\n"


def _local_time(timestamp: datetime) -> datetime:
    return timestamp.astimezone() if timestamp.tzinfo is not None else timestamp


def describe_packet(packet: Packet, config: SnifferConfig) -> str:
    """Return the text printed for a captured packet under the given settings."""
    if not config.verbose:
        return f"{packet}\n"

    parts = [
        "\n=== New Packet ===\n",
        f"Timestamp: {_local_time(packet.timestamp):%Y-%m-%d %H:%M:%S}\n",
        f"Size: {packet.size} bytes\n",
        f"Number of layers: {len(packet.layers)}\n",
    ]
    shown = False
    for number, layer in enumerate(packet.layers, start=1):
        if not _layer_enabled(layer, config):
            continue
        shown = True
        parts.append(f"\nLayer {number}:\n{layer}\n")
        parts.append(_describe_payload(layer, config))
    if not shown:
        parts.append("\n[No layers match the enabled protocol filters]\n")
    parts.append("=" * 50 + "\n\n")
    return "".join(parts)


def _emit(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _capture(config: SnifferConfig, stop: threading.Event) -> int:
    sniffer = PacketSniffer(config)
    sniffer.set_callback(lambda packet: _emit(describe_packet(packet, config)))
    try:
        if config.filter:
            sniffer.set_filter(config.filter)
        sniffer.start()
    except FilterSyntaxError as exc:
        print(f"Couldn't parse filter {config.filter}: {exc}", file=sys.stderr)
        print("Failed to start packet capture", file=sys.stderr)
        return 1
    except SnifferError as exc:
        print(f"Failed to start packet capture: {exc}", file=sys.stderr)
        return 1

    print("Capturing packets (press Ctrl+C to stop)...", flush=True)
    try:
        ticks = 0
        while not stop.wait(_TICK):
            ticks += 1
            if ticks % _STATS_EVERY == 0 and config.verbose:
                stats = sniffer.stats()
                _emit(
                    f"\rPackets: {stats.packets_received} "
                    f"(dropped: {stats.packets_dropped})"
                )
    except KeyboardInterrupt:
        pass
    finally:
        sniffer.stop()

    stats = sniffer.stats()
    print(
        f"\nCapture complete. {stats.packets_received} packets received, "
        f"{stats.packets_dropped} packets dropped"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the command with the given arguments; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, rest = getopt.gnu_getopt(args, _OPTIONS)
    except getopt.GetoptError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        print(usage(PROGRAM_NAME))
        return 0

    config = SnifferConfig(
        filter_tcp=False,
        filter_udp=False,
        filter_icmp=False,
        filter_ethernet=False,
        human_readable=False,
    )
    filter_expr = ""
    port_text = ""
    for opt, value in opts:
        if opt == "-i":
            config.interface = value
        elif opt == "-f":
            filter_expr = value
        elif opt == "-p":
            port_text = value
        elif opt == "-s":
            config.src_ip = value
        elif opt == "-d":
            config.dst_ip = value
        elif opt == "-t":
            config.filter_tcp = True
        elif opt == "-u":
            config.filter_udp = True
        elif opt == "-c":
            config.filter_icmp = True
        elif opt == "-e":
            config.filter_ethernet = True
        elif opt == "-v":
            config.verbose = True
        elif opt == "-H":
            config.human_readable = True
        elif opt == "-h":
            print(usage(PROGRAM_NAME))
            return 0

    if rest:
        filter_expr = rest[0]
    if port_text:
        filter_expr = build_filter(filter_expr, parse_ports(port_text))
    if filter_expr:
        config.filter = filter_expr

    print(" Configuration ===")
    print(f"Verbose mode: {'ON' if config.verbose else 'OFF'}")
    print(f"Interface: {config.interface or '[auto-detect]'}")
    print(f"Filter: {config.filter or '[none]'}")
    print("===========================", flush=True)

    stop = threading.Event()
    previous = {}
    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, lambda *_: stop.set())
    try:
        return _capture(config, stop)
    except Exception as exc:  # noqa: BLE001 - report any failure as the exit status
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


if __name__ == "__main__":
    sys.exit(main())