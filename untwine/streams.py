"""Byte streams backed by callbacks or memory, with little-endian helpers."""

from __future__ import annotations

import struct
from typing import Callable, Protocol

OutputCb = Callable[[bytes], None]
InputCb = Callable[[int], bytes]

_UINT32 = struct.Struct("<I")


class _ByteSink(Protocol):
    def put_bytes(self, data: bytes) -> None: ...


class _ByteSource(Protocol):
    def get_bytes(self, size: int) -> bytes: ...


class OutCbStream:
    """Output stream that hands every write to a callback."""

    def __init__(self, out_cb: OutputCb):
        self._out_cb = out_cb

    def put_bytes(self, data: bytes) -> None:
        self._out_cb(bytes(data))

    def put_byte(self, value: int) -> None:
        self._out_cb(bytes((value,)))


class InCbStream:
    """Input stream that pulls bytes from a callback taking a byte count."""

    def __init__(self, in_cb: InputCb):
        self._in_cb = in_cb

    def get_byte(self) -> int:
        return self.get_bytes(1)[0]

    def get_bytes(self, size: int) -> bytes:
        return bytes(self._in_cb(size))


class MemoryStream:
    """A growable in-memory stream with a separate read index."""

    def __init__(self):
        self.buf = bytearray()
        self.idx = 0

    def put_bytes(self, data: bytes) -> None:
        self.buf.extend(data)

    def put_byte(self, value: int) -> None:
        self.buf.append(value)

    def get_byte(self) -> int:
        if self.idx >= len(self.buf):
            raise IndexError("read past end of memory stream")
        value = self.buf[self.idx]
        self.idx += 1
        return value

    def get_bytes(self, size: int) -> bytes:
        if self.idx + size > len(self.buf):
            raise IndexError("read past end of memory stream")
        data = bytes(self.buf[self.idx:self.idx + size])
        self.idx += size
        return data

    def out_cb(self) -> OutputCb:
        return self.put_bytes

    def in_cb(self) -> InputCb:
        return self.get_bytes

    def num_bytes_put(self) -> int:
        return len(self.buf)

    def copy(self, source: _ByteSource, size: int) -> None:
        """Replace the contents with ``size`` bytes read from ``source``."""
        self.buf = bytearray(source.get_bytes(size))

    @property
    def data(self) -> bytes:
        return bytes(self.buf)


def write_uint32(stream: _ByteSink, value: int):
    """Write ``value`` as a little-endian 32-bit unsigned integer."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"{value} does not fit in 32 unsigned bits")
    stream.put_bytes(_UINT32.pack(value))
    return stream


def read_uint32(stream: _ByteSource) -> int:
    """Read a little-endian 32-bit unsigned integer."""
    return _UINT32.unpack(stream.get_bytes(_UINT32.size))[0]