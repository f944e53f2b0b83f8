"""Common interface of every protocol layer in a captured packet."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PacketParseError(ValueError):
    """Raised when bytes cannot be parsed as a protocol header."""


class Layer(ABC):
    """One protocol header together with the bytes that follow it."""

    @classmethod
    @abstractmethod
    def parse(cls, data: bytes) -> "Layer":
        """Parse a layer from the start of ``data``."""

    @property
    @abstractmethod
    def header_size(self) -> int:
        """Size of this layer's header in bytes."""

    @property
    @abstractmethod
    def payload(self) -> bytes:
        """Bytes carried by this layer."""

    @property
    def payload_size(self) -> int:
        """Size of the payload in bytes."""
        return len(self.payload)

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable description of the layer."""