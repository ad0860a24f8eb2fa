"""Cells: per-voxel point buffers that are filled and handed to a writer."""

from __future__ import annotations

from typing import Callable, Optional

from .epf_types import BUF_SIZE

VoxelKey = tuple[int, int, int, int]


class Cell:
    """A voxel whose points are accumulated in a buffer from the writer.

    When the buffer fills it is queued for writing and a new one is fetched.
    """

    def __init__(self, key: VoxelKey, point_size: int, writer,
                 flush: Callable[[Optional["Cell"]], None]):
        if point_size >= BUF_SIZE:
            raise ValueError(f"point size {point_size} does not fit in a buffer")
        self.key = key
        self.point_size = point_size
        self._writer = writer
        self._flush = flush
        self._buf: bytearray | None = None
        self._pos = 0
        self._end = 0
        self.initialize()

    def initialize(self) -> None:
        """Fetch a fresh buffer, flushing other cells first if none is free."""
        buf = self._writer.fetch_buffer()
        if buf is None:
            self._flush(self)
            buf = self._writer.fetch_buffer_blocking()
        self._buf = buf
        self._pos = 0
        self._end = self.point_size * (len(buf) // self.point_size)

    def point(self) -> memoryview:
        """Writable view of the slot for the next point."""
        if self._buf is None:
            raise ValueError("cell is closed")
        return memoryview(self._buf)[self._pos:self._pos + self.point_size]

    def copy_point(self, data: bytes) -> None:
        """Copy one point's bytes into the next slot."""
        if self._buf is None:
            raise ValueError("cell is closed")
        if len(data) < self.point_size:
            raise ValueError(f"point needs {self.point_size} bytes, got {len(data)}")
        self._buf[self._pos:self._pos + self.point_size] = bytes(data[:self.point_size])

    def advance(self) -> None:
        """Commit the current slot; hand off the buffer when it is full."""
        self._pos += self.point_size
        if self._pos >= self._end:
            self._write()
            self.initialize()

    def close(self) -> None:
        """Hand the buffer to the writer (or back to its cache if empty)."""
        if self._buf is not None:
            self._write()

    def _write(self) -> None:
        buf, self._buf = self._buf, None
        if self._pos:
            self._writer.enqueue(self.key, buf, self._pos)
        else:
            self._writer.replace(buf)


class CellManager:
    """Keeps one cell per voxel for a single point source."""

    def __init__(self, point_size: int, writer):
        self.point_size = point_size
        self._writer = writer
        self._cells: dict[VoxelKey, Cell] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, key: VoxelKey) -> bool:
        return key in self._cells

    def get(self, key: VoxelKey) -> Cell:
        """The cell for ``key``, creating it if needed."""
        cell = self._cells.get(key)
        if cell is None:
            cell = Cell(key, self.point_size, self._writer, self.flush)
            self._cells[key] = cell
        return cell

    def flush(self, exclude: Cell | None) -> None:
        """Close every cell except ``exclude``, releasing their buffers."""
        keep = None
        if exclude is not None and self._cells.get(exclude.key) is exclude:
            keep = exclude
        cells = [c for c in self._cells.values() if c is not keep]
        self._cells = {keep.key: keep} if keep is not None else {}
        for cell in cells:
            cell.close()

    def close(self) -> None:
        """Close all cells."""
        self.flush(None)