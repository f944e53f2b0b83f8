import struct

import pytest

from wiretap.layer import PacketParseError
from wiretap.tcp import TCPFlags, TCPLayer, well_known_port

FIN, SYN, RST, PSH, ACK, URG = 0x01, 0x02, 0x04, 0x08, 0x10, 0x20


def _tcp(src=12345, dst=80, seq=1000, ack=2000, words=5, flags=0,
         window=65535, checksum=0xBEEF, urgent=0, options=b"", body=b""):
    header = struct.pack("!HHIIBBHHH", src, dst, seq, ack, words << 4, flags,
                         window, checksum, urgent)
    return header + options + body


def test_flags_from_byte():
    flags = TCPFlags.from_byte(SYN | ACK)
    assert flags.syn and flags.ack
    assert not (flags.fin or flags.rst or flags.psh or flags.urg or flags.ece or flags.cwr)
    assert str(flags) == "SYN, ACK"


def test_flags_empty_string():
    assert str(TCPFlags.from_byte(0)) == ""


def test_flags_all_in_order():
    assert str(TCPFlags.from_byte(0xFF)) == "FIN, SYN, RST, PSH, ACK, URG, ECE, CWR"


def test_parse_fields():
    layer = TCPLayer.parse(_tcp(flags=PSH | ACK, body=b"data"))
    assert layer.source_port == 12345
    assert layer.dest_port == 80
    assert layer.sequence == 1000
    assert layer.acknowledgment == 2000
    assert layer.window_size == 65535
    assert layer.checksum == 0xBEEF
    assert layer.header_size == 20
    assert layer.flags == TCPFlags(psh=True, ack=True)
    assert layer.payload == b"data"
    assert layer.payload_size == 4


def test_parse_with_options():
    options = b"\x01\x01\x01\x00"
    layer = TCPLayer.parse(_tcp(words=6, options=options, body=b"xy"))
    assert layer.header_size == 24
    assert layer.options == options
    assert layer.payload == b"xy"


def test_too_small_raises():
    with pytest.raises(PacketParseError):
        TCPLayer.parse(b"\x00" * 19)


def test_string_with_ack():
    text = str(TCPLayer.parse(_tcp(flags=ACK)))
    assert text.startswith("Transmission Control Protocol, Src Port: 12345, Dst Port: 80, Seq: 1000, Ack: 2000\n")
    assert "Acknowledgment Number:2000" in text
    assert "Header Length:" in text and "20 bytes" in text
    assert "0xbeef" in text


def test_string_without_ack():
    text = str(TCPLayer.parse(_tcp(flags=SYN)))
    assert "Ack:" not in text
    assert "Acknowledgment Number" not in text
    assert "SYN" in text


def test_urgent_pointer_shown_only_with_urg():
    with_urg = str(TCPLayer.parse(_tcp(flags=URG, urgent=321)))
    without = str(TCPLayer.parse(_tcp(flags=0, urgent=321)))
    assert "Urgent Pointer:" in with_urg and "321" in with_urg
    assert "Urgent Pointer:" not in without


def test_well_known_port_out_of_range():
    assert well_known_port(70000) == ""