"""Ethernet II frame header."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .layer import Layer, PacketParseError

_ETHER_TYPES = {
    0x0800: "IPv4",
    0x86DD: "IPv6",
    0x0806: "ARP",
    0x8100: "VLAN",
}


def mac_to_string(mac: bytes) -> str:
    """Format a MAC address as colon-separated lower-case hex."""
    return ":".join(f"{b:02x}" for b in mac)


@dataclass(frozen=True)
class EthernetLayer(Layer):
    """An Ethernet II header: destination, source and EtherType."""

    HEADER_SIZE: ClassVar[int] = 14
    MAC_ADDR_LEN: ClassVar[int] = 6

    destination: bytes
    source: bytes
    ether_type: int
    payload: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "EthernetLayer":
        if len(data) < cls.HEADER_SIZE:
            raise PacketParseError("Ethernet packet too small")
        destination, source, ether_type = struct.unpack_from("!6s6sH", data)
        return cls(
            destination=destination,
            source=source,
            ether_type=ether_type,
            payload=bytes(data[cls.HEADER_SIZE:]),
        )

    @property
    def header_size(self) -> int:
        return self.HEADER_SIZE

    def __str__(self) -> str:
        src = mac_to_string(self.source)
        dst = mac_to_string(self.destination)
        type_name = _ETHER_TYPES.get(self.ether_type, "Unknown")
        return (
            f"Ethernet II, Src: {src}, Dst: {dst}\n"
            f"  Destination: {dst}\n"
            f"  Source: {src}\n"
            f"  Type: 0x{self.ether_type:04x} ({type_name})\n"
        )