"""TCP header."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass, field, fields
from typing import ClassVar

from .layer import Layer, PacketParseError


def well_known_port(port: int) -> str:
    """Return the TCP service name registered for a port, or '' if none is."""
    try:
        return socket.getservbyport(port, "tcp")
    except (OSError, OverflowError):
        return ""


def _row(label: str, value: object) -> str:
    return f"   {label:<20}{value}\n"


def _port_row(label: str, port: int) -> str:
    line = f"   {label:<20}{port}"
    service = well_known_port(port)
    if service:
        line += f" ({service})"
    return line + "\n"


@dataclass(frozen=True)
class TCPFlags:
    """The eight TCP control bits, lowest bit first."""

    fin: bool = False
    syn: bool = False
    rst: bool = False
    psh: bool = False
    ack: bool = False
    urg: bool = False
    ece: bool = False
    cwr: bool = False

    @classmethod
    def from_byte(cls, value: int) -> "TCPFlags":
        """Decode the flags byte of a TCP header."""
        bits = [bool(value & (1 << i)) for i in range(8)]
        return cls(*bits)

    def __str__(self) -> str:
        return ", ".join(f.name.upper() for f in fields(self) if getattr(self, f.name))


@dataclass(frozen=True)
class TCPLayer(Layer):
    """A TCP header and the segment data that follows it."""

    MIN_HEADER_SIZE: ClassVar[int] = 20

    source_port: int
    dest_port: int
    sequence: int
    acknowledgment: int
    data_offset: int
    flags: TCPFlags
    window_size: int
    checksum: int
    urgent_pointer: int
    options: bytes = b""
    payload: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "TCPLayer":
        if len(data) < cls.MIN_HEADER_SIZE:
            raise PacketParseError("TCP packet too small")
        (source_port, dest_port, sequence, acknowledgment, offset_byte,
         flags_byte, window, checksum, urgent) = struct.unpack_from("!HHIIBBHHH", data)
        data_offset = (offset_byte >> 4) * 4
        options = b""
        if data_offset > cls.MIN_HEADER_SIZE and len(data) >= data_offset:
            options = bytes(data[cls.MIN_HEADER_SIZE:data_offset])
        return cls(
            source_port=source_port,
            dest_port=dest_port,
            sequence=sequence,
            acknowledgment=acknowledgment,
            data_offset=data_offset,
            flags=TCPFlags.from_byte(flags_byte),
            window_size=window,
            checksum=checksum,
            urgent_pointer=urgent,
            options=options,
            payload=bytes(data[data_offset:]),
        )

    @property
    def header_size(self) -> int:
        return self.data_offset

    def __str__(self) -> str:
        summary = (
            f"Transmission Control Protocol, Src Port: {self.source_port}, "
            f"Dst Port: {self.dest_port}, Seq: {self.sequence}"
        )
        if self.flags.ack:
            summary += f", Ack: {self.acknowledgment}"
        lines = [
            summary + "\n",
            _port_row("Source Port:", self.source_port),
            _port_row("Destination Port:", self.dest_port),
            _row("Sequence Number:", self.sequence),
        ]
        if self.flags.ack:
            lines.append(_row("Acknowledgment Number:", self.acknowledgment))
        lines += [
            _row("Header Length:", f"{self.header_size} bytes"),
            _row("Flags:", self.flags),
            _row("Window Size:", self.window_size),
            _row("Checksum:", f"0x{self.checksum:x}"),
        ]
        if self.flags.urg:
            lines.append(_row("Urgent Pointer:", self.urgent_pointer))
        return "".join(lines)