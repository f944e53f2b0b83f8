import struct

import pytest

from wiretap.icmp import ICMPLayer, ICMPType, type_to_string
from wiretap.layer import PacketParseError


def _icmp(icmp_type, code=0, checksum=0, rest=b"\x00\x00\x00\x00", body=b""):
    return struct.pack("!BBH", icmp_type, code, checksum) + rest + body


def test_echo_request_fields():
    data = _icmp(8, 0, 0xABCD, struct.pack("!HH", 4660, 7), b"ping")
    layer = ICMPLayer.parse(data)
    assert layer.icmp_type == ICMPType.ECHO_REQUEST
    assert layer.code == 0
    assert layer.checksum == 0xABCD
    assert layer.identifier == 4660
    assert layer.sequence == 7
    assert layer.header_size == 8
    assert layer.payload == b"ping"
    assert layer.payload_size == 4


def test_echo_request_string():
    data = _icmp(8, 0, 0, struct.pack("!HH", 4660, 7))
    text = str(ICMPLayer.parse(data))
    assert text.startswith("Internet Control Message Protocol\n")
    assert "(Echo Request)" in text
    assert "Identifier:" in text and "4660" in text
    assert "Sequence Number:" in text


def test_checksum_row_is_zero_padded():
    text = str(ICMPLayer.parse(_icmp(0, 0, 0x00FF)))
    assert "0x00ff" in text


def test_too_small_raises():
    with pytest.raises(PacketParseError):
        ICMPLayer.parse(b"\x08\x00\x00")


def test_unknown_type_uses_short_header():
    data = _icmp(42, rest=b"abcd", body=b"ef")
    layer = ICMPLayer.parse(data)
    assert layer.header_size == 4
    assert layer.payload == b"abcdef"
    assert "(Unknown)" in str(layer)


def test_timestamp_request_uses_short_header():
    data = _icmp(13, rest=b"wxyz")
    layer = ICMPLayer.parse(data)
    assert layer.header_size == 4
    assert layer.payload == b"wxyz"


def test_redirect_gateway():
    data = _icmp(5, rest=bytes([192, 0, 2, 1]))
    layer = ICMPLayer.parse(data)
    assert layer.gateway == "192.0.2.1"
    assert "Gateway:" in str(layer)
    assert "192.0.2.1" in str(layer)


def test_destination_unreachable_mtu():
    data = _icmp(3, 4, 0, struct.pack("!HH", 0, 1500))
    layer = ICMPLayer.parse(data)
    assert layer.next_hop_mtu == 1500
    assert layer.header_size == 8
    assert "Next Hop MTU:" in str(layer)
    assert "1500" in str(layer)


def test_parameter_problem_pointer():
    data = _icmp(12, rest=bytes([9, 0, 0, 0]))
    layer = ICMPLayer.parse(data)
    assert layer.pointer == 9
    assert "Pointer:" in str(layer)


def test_time_exceeded_has_no_extra_rows():
    text = str(ICMPLayer.parse(_icmp(11)))
    assert "(Time Exceeded)" in text
    assert text.count("\n") == 4


@pytest.mark.parametrize(
    "icmp_type, name",
    [
        (ICMPType.ECHO_REPLY, "Echo Reply"),
        (ICMPType.DEST_UNREACHABLE, "Destination Unreachable"),
        (ICMPType.SOURCE_QUENCH, "Source Quench"),
        (ICMPType.REDIRECT, "Redirect Message"),
        (ICMPType.ECHO_REQUEST, "Echo Request"),
        (ICMPType.TIME_EXCEEDED, "Time Exceeded"),
        (ICMPType.PARAMETER_PROBLEM, "Parameter Problem"),
        (ICMPType.TIMESTAMP_REQUEST, "Timestamp Request"),
        (ICMPType.TIMESTAMP_REPLY, "Timestamp Reply"),
        (ICMPType.INFO_REQUEST, "Information Request"),
        (ICMPType.INFO_REPLY, "Information Reply"),
        (ICMPType.ADDRESS_MASK_REQUEST, "Address Mask Request"),
        (ICMPType.ADDRESS_MASK_REPLY, "Address Mask Reply"),
        (200, "Unknown"),
    ],
)
def test_type_to_string(icmp_type, name):
    assert type_to_string(icmp_type) == name