"""Settings that control what a sniffer captures and how it is shown."""

from __future__ import annotations

from dataclasses import dataclass, field

_MAX_PORT = 0xFFFF


def _check_ports(name: str, ports: list[int]) -> None:
    for port in ports:
        if not 0 <= port <= _MAX_PORT:
            raise ValueError(f"{name} holds {port}, which is not a valid port")


@dataclass
class SnifferConfig:
    """Capture, filtering and output settings of a packet sniffer."""

    interface: str = ""
    filter: str = ""
    promiscuous: bool = True
    timeout_ms: int = 1000
    max_packets: int = 0

    filter_ethernet: bool = True
    filter_ip: bool = True
    filter_tcp: bool = True
    filter_udp: bool = True
    filter_icmp: bool = True

    src_ports: list[int] = field(default_factory=list)
    dst_ports: list[int] = field(default_factory=list)

    src_ip: str = ""
    dst_ip: str = ""

    verbose: bool = False
    human_readable: bool = False
    show_payload: bool = True
    show_hex: bool = True
    show_ascii: bool = True

    output_file: str = ""

    def __post_init__(self) -> None:
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must not be negative")
        if self.max_packets < 0:
            raise ValueError("max_packets must not be negative")
        _check_ports("src_ports", self.src_ports)
        _check_ports("dst_ports", self.dst_ports)