import socket
import struct

import pytest

from wiretap.filterexpr import FilterExpression, FilterSyntaxError, compile_filter
from wiretap.packet import Packet

_ETH_HEAD = bytes.fromhex("020000000002") + bytes.fromhex("020000000001")


def _frame(proto=6, src="10.0.0.1", dst="10.0.0.2", sport=1234, dport=80):
    if proto == 6:
        l4 = struct.pack("!HHIIBBHHH", sport, dport, 0, 0, 0x50, 0x02, 1024, 0, 0)
    elif proto == 17:
        l4 = struct.pack("!HHHH", sport, dport, 8, 0)
    elif proto == 1:
        l4 = struct.pack("!BBHHH", 8, 0, 0, 1, 1)
    else:
        l4 = bytes(8)
    ip = struct.pack(
        "!BBHHHBBH4s4s", 0x45, 0, 20 + len(l4), 0, 0, 64, proto, 0,
        socket.inet_aton(src), socket.inet_aton(dst),
    )
    return _ETH_HEAD + struct.pack("!H", 0x0800) + ip + l4


def _packet(**kwargs):
    return Packet.parse(_frame(**kwargs), 0)


def _arp_packet():
    return Packet.parse(_ETH_HEAD + struct.pack("!H", 0x0806) + bytes(28), 0)


def test_empty_expression_matches_everything():
    expr = compile_filter("   ")
    assert expr.matches(_packet())
    assert expr.matches(_arp_packet())


def test_protocol_primitives():
    tcp = compile_filter("tcp")
    assert tcp.matches(_packet(proto=6))
    assert not tcp.matches(_packet(proto=17))
    assert compile_filter("icmp").matches(_packet(proto=1))
    assert not compile_filter("udp").matches(_arp_packet())


def test_ether_type_primitives():
    assert compile_filter("arp").matches(_arp_packet())
    assert not compile_filter("ip").matches(_arp_packet())
    assert compile_filter("ip").matches(_packet())


def test_port_matches_either_direction():
    expr = compile_filter("port 80")
    assert expr.matches(_packet(sport=1234, dport=80))
    assert expr.matches(_packet(sport=80, dport=1234))
    assert not expr.matches(_packet(sport=1234, dport=443))


def test_directional_ports():
    assert compile_filter("src port 1234").matches(_packet(sport=1234, dport=80))
    assert not compile_filter("dst port 1234").matches(_packet(sport=1234, dport=80))


def test_protocol_qualified_port():
    expr = compile_filter("udp port 53")
    assert expr.matches(_packet(proto=17, dport=53))
    assert not expr.matches(_packet(proto=6, dport=53))


def test_host_primitives():
    packet = _packet(src="10.0.0.1", dst="10.0.0.2")
    assert compile_filter("host 10.0.0.2").matches(packet)
    assert compile_filter("src host 10.0.0.1").matches(packet)
    assert not compile_filter("src host 10.0.0.2").matches(packet)
    assert compile_filter("dst 10.0.0.2").matches(packet)
    assert compile_filter("10.0.0.1").matches(packet)


def test_net_primitive():
    packet = _packet(src="10.0.0.1", dst="10.0.0.2")
    assert compile_filter("net 10.0.0.0/8").matches(packet)
    assert not compile_filter("net 192.168.0.0/16").matches(packet)


def test_protocol_qualified_host():
    assert compile_filter("tcp host 10.0.0.1").matches(_packet(proto=6))
    assert not compile_filter("tcp host 10.0.0.1").matches(_packet(proto=17))


def test_boolean_operators():
    tcp80 = _packet(proto=6, dport=80)
    udp = _packet(proto=17, dport=53)
    assert compile_filter("tcp and port 80").matches(tcp80)
    assert compile_filter("tcp && port 80").matches(tcp80)
    assert not compile_filter("not tcp").matches(tcp80)
    assert compile_filter("!tcp").matches(udp)
    assert compile_filter("tcp or udp").matches(udp)
    assert compile_filter("tcp || udp").matches(tcp80)


def test_and_binds_tighter_than_or():
    udp = _packet(proto=17, dport=53)
    assert compile_filter("udp or tcp and port 81").matches(udp)
    assert not compile_filter("(udp or tcp) and port 81").matches(udp)


def test_combined_port_filter():
    expr = compile_filter("(tcp) and (port 22 or port 80)")
    assert expr.matches(_packet(proto=6, dport=80))
    assert not expr.matches(_packet(proto=6, dport=25))


@pytest.mark.parametrize(
    "text",
    [
        "tcp and",
        "(tcp",
        "tcp)",
        "port 70000",
        "host 300.1.1.1",
        "bogus",
        "icmp port 7",
        "arp host 10.0.0.1",
        "net 10.0.0.0/40",
        "&",
        "not",
    ],
)
def test_syntax_errors(text):
    with pytest.raises(FilterSyntaxError):
        compile_filter(text)


def test_syntax_error_is_a_value_error():
    with pytest.raises(ValueError):
        compile_filter("port")


def test_expression_text_round_trips():
    text = "tcp and (port 80 or port 443)"
    expr = compile_filter(text)
    assert str(expr) == text
    assert expr == compile_filter(text)
    assert isinstance(expr, FilterExpression) and expr.expression == text