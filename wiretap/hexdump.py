"""Hex dump and printable-string rendering of raw bytes."""

from __future__ import annotations

import re

_BYTES_PER_LINE = 16
_PRINTABLE_RUN = re.compile(rb"[\x20-\x7e]+")


def byte_to_hex(byte: int) -> str:
    """Return a byte as two lower-case hex digits."""
    return f"{byte & 0xFF:02x}"


def byte_to_ascii(byte: int) -> str:
    """Return the printable character for a byte, or '.' when it is not printable."""
    return chr(byte) if 32 <= byte <= 126 else "."


def to_hex(data: bytes) -> str:
    """Return every byte as two hex digits followed by a space."""
    return "".join(f"{byte_to_hex(b)} " for b in data)


def hex_dump(data: bytes, show_ascii: bool = True) -> str:
    """Format bytes as an offset / hex / ASCII dump, sixteen bytes per line."""
    lines = []
    for offset in range(0, len(data), _BYTES_PER_LINE):
        chunk = data[offset:offset + _BYTES_PER_LINE]
        cells = [f"{byte_to_hex(b)} " for b in chunk]
        cells += ["   "] * (_BYTES_PER_LINE - len(chunk))
        hex_part = "".join(cells[:8]) + " " + "".join(cells[8:])
        line = f"    {offset:08x}  {hex_part}"
        if show_ascii:
            line += " |" + "".join(byte_to_ascii(b) for b in chunk) + "|"
        lines.append(line + "\n")
    return "".join(lines)


def format_human(data: bytes) -> str:
    """Format bytes as a hex dump followed by the printable strings they contain."""
    size = len(data)
    parts = [
        f"Hex dump ({size} bytes):\n",
        hex_dump(data, True),
        "\n",
        f"Human-readable string ({size} bytes):\n",
    ]
    for match in _PRINTABLE_RUN.finditer(data):
        parts.append(f"    {match.start():>8x}  {match.group().decode('ascii')}\n")
    parts.append("\n")
    return "".join(parts)