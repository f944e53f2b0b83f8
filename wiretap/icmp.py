"""ICMP header."""

from __future__ import annotations

import enum
import socket
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .layer import Layer, PacketParseError


class ICMPType(enum.IntEnum):
    """ICMP message types."""

    ECHO_REPLY = 0
    DEST_UNREACHABLE = 3
    SOURCE_QUENCH = 4
    REDIRECT = 5
    ECHO_REQUEST = 8
    TIME_EXCEEDED = 11
    PARAMETER_PROBLEM = 12
    TIMESTAMP_REQUEST = 13
    TIMESTAMP_REPLY = 14
    INFO_REQUEST = 15
    INFO_REPLY = 16
    ADDRESS_MASK_REQUEST = 17
    ADDRESS_MASK_REPLY = 18


_TYPE_NAMES = {
    ICMPType.ECHO_REPLY: "Echo Reply",
    ICMPType.DEST_UNREACHABLE: "Destination Unreachable",
    ICMPType.SOURCE_QUENCH: "Source Quench",
    ICMPType.REDIRECT: "Redirect Message",
    ICMPType.ECHO_REQUEST: "Echo Request",
    ICMPType.TIME_EXCEEDED: "Time Exceeded",
    ICMPType.PARAMETER_PROBLEM: "Parameter Problem",
    ICMPType.TIMESTAMP_REQUEST: "Timestamp Request",
    ICMPType.TIMESTAMP_REPLY: "Timestamp Reply",
    ICMPType.INFO_REQUEST: "Information Request",
    ICMPType.INFO_REPLY: "Information Reply",
    ICMPType.ADDRESS_MASK_REQUEST: "Address Mask Request",
    ICMPType.ADDRESS_MASK_REPLY: "Address Mask Reply",
}

_BASIC_HEADER_SIZE = 4

# Types whose header includes the four type-specific bytes.
_HEADER_SIZES = {
    icmp_type: 8
    for icmp_type in (
        ICMPType.ECHO_REPLY,
        ICMPType.ECHO_REQUEST,
        ICMPType.DEST_UNREACHABLE,
        ICMPType.TIME_EXCEEDED,
        ICMPType.PARAMETER_PROBLEM,
        ICMPType.REDIRECT,
    )
}


def type_to_string(icmp_type: int) -> str:
    """Return the name of an ICMP message type, or 'Unknown'."""
    return _TYPE_NAMES.get(icmp_type, "Unknown")


def _row(label: str, value: object) -> str:
    return f"   {label:<20}{value}\n"


@dataclass(frozen=True)
class ICMPLayer(Layer):
    """An ICMP header and the message body that follows it."""

    MIN_HEADER_SIZE: ClassVar[int] = 8

    icmp_type: int
    code: int
    checksum: int
    rest_of_header: bytes
    payload: bytes = field(default=b"", repr=False)

    @classmethod
    def parse(cls, data: bytes) -> "ICMPLayer":
        if len(data) < cls.MIN_HEADER_SIZE:
            raise PacketParseError("ICMP packet too small")
        icmp_type, code, checksum, rest = struct.unpack_from("!BBH4s", data)
        header_size = _HEADER_SIZES.get(icmp_type, _BASIC_HEADER_SIZE)
        return cls(
            icmp_type=icmp_type,
            code=code,
            checksum=checksum,
            rest_of_header=rest,
            payload=bytes(data[header_size:]),
        )

    @property
    def header_size(self) -> int:
        return _HEADER_SIZES.get(self.icmp_type, _BASIC_HEADER_SIZE)

    @property
    def identifier(self) -> int:
        """Echo identifier."""
        return struct.unpack_from("!H", self.rest_of_header, 0)[0]

    @property
    def sequence(self) -> int:
        """Echo sequence number."""
        return struct.unpack_from("!H", self.rest_of_header, 2)[0]

    @property
    def next_hop_mtu(self) -> int:
        """Next-hop MTU of a destination-unreachable message."""
        return struct.unpack_from("!H", self.rest_of_header, 2)[0]

    @property
    def gateway(self) -> str:
        """Gateway address of a redirect message."""
        return socket.inet_ntoa(self.rest_of_header)

    @property
    def pointer(self) -> int:
        """Offending octet pointer of a parameter-problem message."""
        return self.rest_of_header[0]

    def __str__(self) -> str:
        t = self.icmp_type
        lines = [
            "Internet Control Message Protocol\n",
            _row("Type:", f"{t} ({type_to_string(t)})"),
            _row("Code:", self.code),
            _row("Checksum:", f"0x{self.checksum:04x}"),
        ]
        if t in (ICMPType.ECHO_REPLY, ICMPType.ECHO_REQUEST):
            lines.append(_row("Identifier:", self.identifier))
            lines.append(_row("Sequence Number:", self.sequence))
        elif t == ICMPType.DEST_UNREACHABLE:
            lines.append(_row("Next Hop MTU:", self.next_hop_mtu))
        elif t == ICMPType.REDIRECT:
            lines.append(_row("Gateway:", self.gateway))
        elif t == ICMPType.PARAMETER_PROBLEM:
            lines.append(_row("Pointer:", self.pointer))
        return "".join(lines)