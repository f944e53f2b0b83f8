"""A captured frame decoded into its protocol layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Type, TypeVar, Union

from .ethernet import EthernetLayer
from .icmp import ICMPLayer
from .ip import IPLayer, Protocol
from .layer import Layer
from .tcp import TCPLayer
from .udp import UDPLayer

L = TypeVar("L", bound=Layer)

_TRANSPORTS = {
    Protocol.TCP: TCPLayer,
    Protocol.UDP: UDPLayer,
    Protocol.ICMP: ICMPLayer,
}

_MIN_TRANSPORT_SIZE = {
    TCPLayer: TCPLayer.MIN_HEADER_SIZE,
    UDPLayer: UDPLayer.HEADER_SIZE,
    ICMPLayer: ICMPLayer.MIN_HEADER_SIZE,
}


def _to_datetime(timestamp: Union[datetime, float, int]) -> datetime:
    if isinstance(timestamp, datetime):
        return timestamp
    return datetime.fromtimestamp(timestamp)


def _decode_layers(data: bytes) -> tuple[Layer, ...]:
    if len(data) < EthernetLayer.HEADER_SIZE:
        return ()
    ethernet = EthernetLayer.parse(data)
    layers: list[Layer] = [ethernet]
    if ethernet.ether_type != 0x0800 or len(ethernet.payload) < IPLayer.MIN_HEADER_SIZE:
        return tuple(layers)
    ip = IPLayer.parse(ethernet.payload)
    layers.append(ip)
    transport = _TRANSPORTS.get(ip.protocol)
    if transport is not None and len(ip.payload) >= _MIN_TRANSPORT_SIZE[transport]:
        layers.append(transport.parse(ip.payload))
    return tuple(layers)


@dataclass(frozen=True)
class Packet:
    """A captured frame, when it was captured and the layers decoded from it."""

    data: bytes = field(repr=False)
    timestamp: datetime
    layers: tuple[Layer, ...] = ()

    @classmethod
    def parse(cls, data: bytes, timestamp: Union[datetime, float, int]) -> "Packet":
        """Decode Ethernet, IPv4 and transport layers from a captured frame."""
        data = bytes(data)
        return cls(data=data, timestamp=_to_datetime(timestamp), layers=_decode_layers(data))

    @property
    def size(self) -> int:
        """Captured length in bytes."""
        return len(self.data)

    def get_layer(self, layer_type: Type[L]) -> Optional[L]:
        """Return the first layer of the given type, or None."""
        return next((layer for layer in self.layers if isinstance(layer, layer_type)), None)

    def __str__(self) -> str:
        ts = self.timestamp
        if ts.tzinfo is not None:
            ts = ts.astimezone()
        head = (
            f"[{ts:%Y-%m-%d %H:%M:%S}.{ts.microsecond // 1000:03d}] "
            f"Packet ({self.size} bytes)\n"
        )
        return head + "".join(f"{layer}\n" for layer in self.layers)