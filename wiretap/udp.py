"""UDP header."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .layer import Layer, PacketParseError


def well_known_port(port: int) -> str:
    """Return the UDP service name registered for a port, or '' if none is."""
    try:
        return socket.getservbyport(port, "udp")
    except (OSError, OverflowError):
        return ""


def _port_row(label: str, port: int) -> str:
    line = f"   {label:<20}{port}"
    service = well_known_port(port)
    if service:
        line += f" ({service})"
    return line + "\n"


@dataclass(frozen=True)
class UDPLayer(Layer):
    """A UDP header and the datagram payload it declares."""

    HEADER_SIZE: ClassVar[int] = 8

    source_port: int
    dest_port: int
    length: int
    checksum: int
    payload: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "UDPLayer":
        if len(data) < cls.HEADER_SIZE:
            raise PacketParseError("UDP packet too small")
        source_port, dest_port, length, checksum = struct.unpack_from("!HHHH", data)
        if length < cls.HEADER_SIZE:
            raise PacketParseError("Invalid UDP length field")
        return cls(
            source_port=source_port,
            dest_port=dest_port,
            length=length,
            checksum=checksum,
            payload=bytes(data[cls.HEADER_SIZE:length]),
        )

    @property
    def header_size(self) -> int:
        return self.HEADER_SIZE

    @property
    def payload_size(self) -> int:
        """Payload size declared by the length field."""
        return self.length - self.HEADER_SIZE

    def __str__(self) -> str:
        return "".join([
            f"User Datagram Protocol, Src Port: {self.source_port}, "
            f"Dst Port: {self.dest_port}\n",
            _port_row("Source Port:", self.source_port),
            _port_row("Destination Port:", self.dest_port),
            f"   {'Length:':<20}{self.length}\n",
            f"   {'Checksum:':<20}0x{self.checksum:04x}\n",
        ])