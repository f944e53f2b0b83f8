from dataclasses import dataclass

import pytest

from wiretap.layer import Layer, PacketParseError


@dataclass(frozen=True)
class _Opaque(Layer):
    payload: bytes = b""

    @classmethod
    def parse(cls, data):
        if len(data) < 2:
            raise PacketParseError("too small")
        return cls(payload=data[2:])

    @property
    def header_size(self):
        return 2

    def __str__(self):
        return "Opaque"


def test_layer_is_abstract():
    with pytest.raises(TypeError):
        Layer()


def test_default_payload_size_is_payload_length():
    layer = _Opaque.parse(b"\x00\x01abcdef")
    assert layer.payload == b"abcdef"
    assert Layer.payload_size.__get__(layer, _Opaque) == 6
    assert layer.payload_size == len(layer.payload)
    assert layer.header_size == 2


def test_default_payload_size_of_empty_payload_is_zero():
    layer = _Opaque.parse(b"\x00\x01")
    assert Layer.payload_size.__get__(layer, _Opaque) == 0


def test_parse_error_is_value_error():
    error = PacketParseError("too small")
    assert isinstance(error, ValueError)
    assert str(error) == "too small"
    with pytest.raises(PacketParseError, match="too small"):
        _Opaque.parse(b"\x00")


def test_incomplete_subclass_cannot_be_instantiated():
    class Partial(Layer):
        @classmethod
        def parse(cls, data):
            return cls()

        def __str__(self):
            return ""

    with pytest.raises(TypeError):
        Layer.__new__(Partial)
    with pytest.raises(TypeError):
        Partial.parse(b"")