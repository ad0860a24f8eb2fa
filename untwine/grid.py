"""The N x N x N grid into which input points are first distributed.

Voxel keys are tuples ``(x, y, z, level)``.
"""

from __future__ import annotations

import math
from dataclasses import replace

from .bounds import Bounds
from .epf_types import MAX_POINTS_PER_NODE


class Grid:
    """Grid over the data extent whose level grows with the point count."""

    def __init__(self, cubic: bool = True):
        self.cubic = cubic
        self.grid_size = -1
        self.max_level = -1
        self.bounds = Bounds()
        self.cubic_bounds = Bounds()
        self.million_points = 0
        self._xsize = 0.0
        self._ysize = 0.0
        self._zsize = 0.0

    def expand(self, bounds: Bounds, points: int) -> None:
        """Grow the grid to cover ``bounds`` holding ``points`` more points."""
        self.bounds.grow(bounds)
        b = self.bounds
        side = max(b.maxx - b.minx, b.maxy - b.miny, b.maxz - b.minz)
        self.cubic_bounds = Bounds(b.minx, b.miny, b.minz,
                                   b.minx + side, b.miny + side, b.minz + side)
        self.million_points += int(points / 1000000.0)
        self.reset_level(self.calc_level())

    def calc_level(self) -> int:
        """Level at which a cell would hold roughly the maximum points per node."""
        b = self.bounds
        xside = b.maxx - b.minx
        yside = b.maxy - b.miny
        zside = b.maxz - b.minz
        side = max(xside, yside, zside)
        mp = float(self.million_points)
        level = 0
        while mp > MAX_POINTS_PER_NODE / 1000000.0:
            if self.cubic:
                for axis_side in (xside, yside, zside):
                    if axis_side >= side:
                        mp /= 2
            else:
                mp /= 8
            side /= 2
            level += 1
        return level

    def reset_level(self, level: int) -> None:
        """Set the grid level (at least 1) and recompute cell sizes."""
        self.max_level = max(level, 1)
        self.grid_size = 2 ** self.max_level
        if self.cubic:
            cb = self.cubic_bounds
            self._xsize = (cb.maxx - cb.minx) / self.grid_size
            self._ysize = self._xsize
            self._zsize = self._xsize
        else:
            b = self.bounds
            self._xsize = (b.maxx - b.minx) / self.grid_size
            self._ysize = (b.maxy - b.miny) / self.grid_size
            self._zsize = (b.maxz - b.minz) / self.grid_size

    def _index(self, value: float, low: float, size: float) -> int:
        idx = 0 if size == 0 else math.floor((value - low) / size)
        return min(max(0, idx), self.grid_size - 1)

    def key(self, x: float, y: float, z: float) -> tuple[int, int, int, int]:
        """Voxel key of the cell containing a point, clamped to the grid."""
        if self.grid_size < 1:
            raise ValueError("grid level has not been set")
        b = self.bounds
        return (self._index(x, b.minx, self._xsize),
                self._index(y, b.miny, self._ysize),
                self._index(z, b.minz, self._zsize),
                self.max_level)

    def processing_bounds(self) -> Bounds:
        """Bounds used for tiling: cubic if the grid is cubic."""
        return replace(self.cubic_bounds if self.cubic else self.bounds)

    def conforming_bounds(self) -> Bounds:
        """Bounds exactly covering the data."""
        return replace(self.bounds)