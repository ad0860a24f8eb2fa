"""A fixed-size byte buffer with independent read and write positions."""

from __future__ import annotations

import enum
import os


class OpenMode(enum.Flag):
    """Which position(s) a seek applies to."""

    IN = enum.auto()
    OUT = enum.auto()


_BOTH = OpenMode.IN | OpenMode.OUT


class CharBuffer:
    """Wrap a mutable byte buffer so it can be read and written like a stream.

    Absolute positions given to :meth:`seekpos` and to :meth:`seekoff` with
    ``os.SEEK_SET`` are measured from ``buf_offset`` rather than from the
    start of the buffer.
    """

    def __init__(self, buf: bytearray | memoryview | None = None, buf_offset: int = 0):
        self.initialize(bytearray() if buf is None else buf, buf_offset)

    def initialize(self, buf: bytearray | memoryview | bytes, buf_offset: int = 0) -> None:
        """Back this buffer with ``buf`` and reset both positions."""
        self._view = memoryview(buf).cast("B")
        self._offset = buf_offset
        self._get = 0
        self._put = 0

    @property
    def size(self) -> int:
        return len(self._view)

    @property
    def get_pos(self) -> int:
        """Read position relative to the start of the buffer."""
        return self._get

    @property
    def put_pos(self) -> int:
        """Write position relative to the start of the buffer."""
        return self._put

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (all remaining if negative)."""
        remaining = self.size - self._get
        count = remaining if size < 0 else min(size, remaining)
        data = bytes(self._view[self._get:self._get + count])
        self._get += count
        return data

    def write(self, data: bytes) -> int:
        """Write as much of ``data`` as fits; return the number of bytes written."""
        if self._view.readonly:
            raise TypeError("buffer is read-only")
        count = min(len(data), self.size - self._put)
        self._view[self._put:self._put + count] = bytes(data[:count])
        self._put += count
        return count

    def seekpos(self, pos: int, which: OpenMode = _BOTH) -> int:
        """Seek to an absolute position; return it relative to the buffer start."""
        rel = pos - self._offset
        if OpenMode.IN in which:
            if rel < 0 or rel >= self.size:
                raise ValueError(f"read position {pos} is outside the buffer")
            self._get = rel
        if OpenMode.OUT in which:
            if rel < 0 or rel > self.size:
                raise ValueError(f"write position {pos} is outside the buffer")
            self._put = rel
        return rel

    def seekoff(self, off: int, whence: int = os.SEEK_SET, which: OpenMode = _BOTH) -> int:
        """Seek relative to ``whence``; return the new position from the buffer start.

        With ``os.SEEK_END`` the offset is counted backwards from the end.
        """
        if not which & _BOTH:
            raise ValueError("no position selected to seek")
        pos = 0
        if OpenMode.IN in which:
            pos = self._target(off, whence, self._get)
            self._get = pos
        if OpenMode.OUT in which:
            pos = self._target(off, whence, self._put)
            self._put = pos
        return pos

    def _target(self, off: int, whence: int, current: int) -> int:
        if whence == os.SEEK_SET:
            target = off - self._offset
        elif whence == os.SEEK_CUR:
            target = current + off
        elif whence == os.SEEK_END:
            target = self.size - off
        else:
            raise ValueError(f"invalid whence value {whence}")
        if target < 0 or target > self.size:
            raise ValueError(f"seek offset {off} is outside the buffer")
        return target