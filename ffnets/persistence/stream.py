"""Big-endian primitive readers and writers over binary streams.

The encoding matches the usual "data stream" conventions: 4-byte two's
complement ints and text written as a 2-byte unsigned length followed by
modified UTF-8 bytes. Real values are written in bulk by the file format.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

_INT = struct.Struct(">i")
_LENGTH = struct.Struct(">H")


def encode_modified_utf8(text: str) -> bytes:
    """Encode ``text`` as modified UTF-8 (NUL as two bytes, surrogate pairs)."""

    encoded = bytearray()
    for char in text:
        code = ord(char)
        if code > 0xFFFF:
            high = 0xD800 + ((code - 0x10000) >> 10)
            low = 0xDC00 + ((code - 0x10000) & 0x3FF)
            encoded += _encode_unit(high) + _encode_unit(low)
        else:
            encoded += _encode_unit(code)
    return bytes(encoded)


def _encode_unit(code: int) -> bytes:
    if 0 < code < 0x80:
        return bytes((code,))
    if code < 0x800:
        return bytes((0xC0 | (code >> 6), 0x80 | (code & 0x3F)))
    return bytes((0xE0 | (code >> 12), 0x80 | ((code >> 6) & 0x3F), 0x80 | (code & 0x3F)))


def decode_modified_utf8(data: bytes) -> str:
    """Inverse of :func:`encode_modified_utf8`."""

    return (
        data.replace(b"\xc0\x80", b"\x00")
        .decode("utf-8", "surrogatepass")
        .encode("utf-16", "surrogatepass")
        .decode("utf-16")
    )


class DataOutput:
    """Write primitives to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def write_int(self, value: int) -> None:
        self.stream.write(_INT.pack(value))

    def write_utf(self, text: str) -> None:
        encoded = encode_modified_utf8(text)
        if len(encoded) > 0xFFFF:
            raise ValueError(f"Encoded text too long: {len(encoded)} bytes")
        self.stream.write(_LENGTH.pack(len(encoded)))
        self.stream.write(encoded)


class DataInput:
    """Read primitives from a binary stream; short reads raise ``EOFError``."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def read_fully(self, size: int) -> bytes:
        data = self.stream.read(size)
        if data is None or len(data) < size:
            raise EOFError(f"Expected {size} bytes, got {0 if data is None else len(data)}")
        return data

    def read_int(self) -> int:
        return _INT.unpack(self.read_fully(_INT.size))[0]

    def read_utf(self) -> str:
        (length,) = _LENGTH.unpack(self.read_fully(_LENGTH.size))
        return decode_modified_utf8(self.read_fully(length))


__all__ = [
    "DataInput",
    "DataOutput",
    "decode_modified_utf8",
    "encode_modified_utf8",
]
