"""IPv4 header."""

from __future__ import annotations

import enum
import socket
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .layer import Layer, PacketParseError


class Protocol(enum.IntEnum):
    """Transport protocols recognised in the IPv4 protocol field."""

    ICMP = 1
    TCP = 6
    UDP = 17
    UNKNOWN = 255


_PROTOCOL_NAMES = {
    Protocol.ICMP: "ICMP",
    Protocol.TCP: "TCP",
    Protocol.UDP: "UDP",
}

_DONT_FRAGMENT = 0x02
_MORE_FRAGMENTS = 0x01


def protocol_to_string(protocol: int) -> str:
    """Return the name of a protocol number, or 'Unknown'."""
    return _PROTOCOL_NAMES.get(protocol, "Unknown")


def _row(label: str, value: object) -> str:
    return f"   {label:<20}{value}\n"


@dataclass(frozen=True)
class IPLayer(Layer):
    """An IPv4 header and the datagram it carries."""

    MIN_HEADER_SIZE: ClassVar[int] = 20

    version: int
    ihl: int
    dscp: int
    total_length: int
    identification: int
    flags: int
    fragment_offset: int
    ttl: int
    protocol_number: int
    checksum: int
    source_ip: str
    dest_ip: str
    payload: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "IPLayer":
        if len(data) < cls.MIN_HEADER_SIZE:
            raise PacketParseError("IP packet too small")
        (ver_ihl, tos, total_length, identification, frag, ttl, proto,
         checksum, src, dst) = struct.unpack_from("!BBHHHBBH4s4s", data)
        ihl = (ver_ihl & 0x0F) * 4
        return cls(
            version=ver_ihl >> 4,
            ihl=ihl,
            dscp=(tos >> 2) & 0x3F,
            total_length=total_length,
            identification=identification,
            flags=(frag >> 13) & 0x07,
            fragment_offset=frag & 0x1FFF,
            ttl=ttl,
            protocol_number=proto,
            checksum=checksum,
            source_ip=socket.inet_ntoa(src),
            dest_ip=socket.inet_ntoa(dst),
            payload=bytes(data[ihl:total_length]),
        )

    @property
    def header_size(self) -> int:
        return self.ihl

    @property
    def payload_size(self) -> int:
        """Payload size declared by the header: total length minus header length."""
        return (self.total_length - self.ihl) & 0xFFFF

    @property
    def protocol(self) -> Protocol:
        try:
            return Protocol(self.protocol_number)
        except ValueError:
            return Protocol.UNKNOWN

    @property
    def dont_fragment(self) -> bool:
        return bool(self.flags & _DONT_FRAGMENT)

    @property
    def more_fragments(self) -> bool:
        return bool(self.flags & _MORE_FRAGMENTS)

    def __str__(self) -> str:
        flags = f"0x{self.flags:x}"
        if self.dont_fragment:
            flags += " (Don't Fragment)"
        if self.more_fragments:
            flags += " (More Fragments)"
        protocol = f"{protocol_to_string(self.protocol_number)} ({self.protocol_number})"
        return "".join([
            f"Internet Protocol Version {self.version}, "
            f"Src: {self.source_ip}, Dst: {self.dest_ip}\n",
            _row("0100 .... = Version:", self.version),
            _row(".... 0101 = Header Length:", f"{self.ihl} bytes"),
            _row("Differentiated Services:", f"0x{self.dscp:02x}"),
            _row("Total Length:", self.total_length),
            _row("Identification:", f"0x{self.identification:x}"),
            _row("Flags:", flags),
            _row("Fragment Offset:", self.fragment_offset),
            _row("Time to Live:", self.ttl),
            _row("Protocol:", protocol),
            _row("Header Checksum:", f"0x{self.checksum:x}"),
            _row("Source:", self.source_ip),
            _row("Destination:", self.dest_ip),
        ])