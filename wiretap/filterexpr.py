"""Capture filter expressions in the style of tcpdump."""

from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass, field
from typing import Callable, Optional

from .ethernet import EthernetLayer
from .ip import IPLayer, Protocol
from .packet import Packet
from .tcp import TCPLayer
from .udp import UDPLayer

Predicate = Callable[[Packet], bool]

_LEXEME = re.compile(r"\(|\)|&&|\|\||!|[^\s()!&|]+|\S")
_IP_PROTOCOLS = {"tcp": Protocol.TCP, "udp": Protocol.UDP, "icmp": Protocol.ICMP}
_ETHER_TYPES = {"ip": 0x0800, "arp": 0x0806, "ip6": 0x86DD}
_PORT_LAYERS = {"tcp": (TCPLayer,), "udp": (UDPLayer,)}
_DIRECTIONS = frozenset({"src", "dst"})
_KINDS = frozenset({"host", "net", "port"})
_AND = frozenset({"and", "&&"})
_OR = frozenset({"or", "||"})
_NOT = frozenset({"not", "!"})
_MAX_PORT = 0xFFFF


class FilterSyntaxError(ValueError):
    """Raised when a filter expression cannot be compiled."""


def _select(direction: Optional[str], source, dest) -> tuple:
    if direction == "src":
        return (source,)
    if direction == "dst":
        return (dest,)
    return (source, dest)


def _protocol(name: str) -> Predicate:
    if name in _IP_PROTOCOLS:
        number = _IP_PROTOCOLS[name]

        def ip_protocol(packet: Packet) -> bool:
            ip = packet.get_layer(IPLayer)
            return ip is not None and ip.protocol_number == number

        return ip_protocol

    ether_type = _ETHER_TYPES[name]

    def ether(packet: Packet) -> bool:
        eth = packet.get_layer(EthernetLayer)
        return eth is not None and eth.ether_type == ether_type

    return ether


def _address_in(direction: Optional[str], network: ipaddress.IPv4Network) -> Predicate:
    def address(packet: Packet) -> bool:
        ip = packet.get_layer(IPLayer)
        if ip is None:
            return False
        return any(
            ipaddress.IPv4Address(addr) in network
            for addr in _select(direction, ip.source_ip, ip.dest_ip)
        )

    return address


def _port(direction: Optional[str], port: int, layer_types: tuple) -> Predicate:
    def port_match(packet: Packet) -> bool:
        for layer_type in layer_types:
            layer = packet.get_layer(layer_type)
            if layer is not None and port in _select(direction, layer.source_port, layer.dest_port):
                return True
        return False

    return port_match


def _parse_port(value: str, proto: Optional[str]) -> int:
    if value.isdigit():
        port = int(value)
        if port > _MAX_PORT:
            raise FilterSyntaxError(f"port {value} out of range")
        return port
    try:
        return socket.getservbyname(value, "udp" if proto == "udp" else "tcp")
    except OSError:
        raise FilterSyntaxError(f"unknown port {value!r}") from None


def _parse_host(value: str) -> ipaddress.IPv4Network:
    try:
        return ipaddress.IPv4Network(ipaddress.IPv4Address(value))
    except ValueError:
        raise FilterSyntaxError(f"invalid host address {value!r}") from None


def _parse_net(value: str) -> ipaddress.IPv4Network:
    try:
        return ipaddress.IPv4Network(value, strict=False)
    except ValueError:
        raise FilterSyntaxError(f"invalid network {value!r}") from None


class _Parser:
    def __init__(self, text: str) -> None:
        self._words = _LEXEME.findall(text)
        self._pos = 0

    def _peek(self) -> Optional[str]:
        return self._words[self._pos] if self._pos < len(self._words) else None

    def _next(self, expected: str) -> str:
        word = self._peek()
        if word is None:
            raise FilterSyntaxError(f"unexpected end of expression, expected {expected}")
        self._pos += 1
        return word

    def parse(self) -> Optional[Predicate]:
        """Return the predicate, or None when the expression is empty."""
        if not self._words:
            return None
        predicate = self._or()
        trailing = self._peek()
        if trailing is not None:
            raise FilterSyntaxError(f"unexpected token {trailing!r}")
        return predicate

    def _or(self) -> Predicate:
        terms = [self._and()]
        while self._peek() in _OR:
            self._pos += 1
            terms.append(self._and())
        if len(terms) == 1:
            return terms[0]
        return lambda packet: any(term(packet) for term in terms)

    def _and(self) -> Predicate:
        terms = [self._unary()]
        while self._peek() in _AND:
            self._pos += 1
            terms.append(self._unary())
        if len(terms) == 1:
            return terms[0]
        return lambda packet: all(term(packet) for term in terms)

    def _unary(self) -> Predicate:
        word = self._next("a primitive")
        if word in _NOT:
            inner = self._unary()
            return lambda packet: not inner(packet)
        if word == "(":
            inner = self._or()
            if self._next("')'") != ")":
                raise FilterSyntaxError("expected ')'")
            return inner
        return self._primitive(word)

    def _primitive(self, word: str) -> Predicate:
        proto: Optional[str] = None
        if word in _IP_PROTOCOLS or word in _ETHER_TYPES:
            proto = word
            following = self._peek()
            if following not in _DIRECTIONS and following not in _KINDS:
                return _protocol(proto)
            word = self._next("a qualifier")

        direction: Optional[str] = None
        if word in _DIRECTIONS:
            direction = word
            word = self._next("'host', 'net', 'port' or an address")

        if word in _KINDS:
            kind = word
            value = self._next(f"a value after {word!r}")
        else:
            kind, value = "host", word

        if kind == "port":
            if proto is not None and proto not in _PORT_LAYERS:
                raise FilterSyntaxError(f"port qualifier is not valid with {proto!r}")
            layers = _PORT_LAYERS.get(proto, (TCPLayer, UDPLayer))
            return _port(direction, _parse_port(value, proto), layers)

        network = _parse_host(value) if kind == "host" else _parse_net(value)
        address = _address_in(direction, network)
        if proto is None or proto == "ip":
            return address
        if proto in _IP_PROTOCOLS:
            protocol = _protocol(proto)
            return lambda packet: protocol(packet) and address(packet)
        raise FilterSyntaxError(f"{kind} qualifier is not valid with {proto!r}")


@dataclass(frozen=True)
class FilterExpression:
    """A compiled filter expression that can be tested against packets."""

    expression: str
    _predicate: Optional[Predicate] = field(repr=False, compare=False)

    def matches(self, packet: Packet) -> bool:
        """Return True when the packet satisfies the expression."""
        if self._predicate is None:
            return True
        return bool(self._predicate(packet))

    def __str__(self) -> str:
        return self.expression


def compile_filter(expression: str) -> FilterExpression:
    """Compile a filter expression; an empty expression matches every packet."""
    return FilterExpression(expression, _Parser(expression).parse())