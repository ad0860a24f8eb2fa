"""Axis-aligned 3D bounding boxes."""

from __future__ import annotations

import sys
from dataclasses import dataclass

_HIGHEST = sys.float_info.max
_LOWEST = -sys.float_info.max


@dataclass
class Bounds:
    """A 3D box; the default box is empty and grows to fit what is added."""

    minx: float = _HIGHEST
    miny: float = _HIGHEST
    minz: float = _HIGHEST
    maxx: float = _LOWEST
    maxy: float = _LOWEST
    maxz: float = _LOWEST

    def grow(self, other: Bounds) -> None:
        """Extend this box to include ``other``."""
        self.minx = min(self.minx, other.minx)
        self.miny = min(self.miny, other.miny)
        self.minz = min(self.minz, other.minz)
        self.maxx = max(self.maxx, other.maxx)
        self.maxy = max(self.maxy, other.maxy)
        self.maxz = max(self.maxz, other.maxz)

    def valid(self) -> bool:
        """True if the box contains at least one point."""
        return self.minx <= self.maxx and self.miny <= self.maxy and self.minz <= self.maxz