"""Shared settings and input-file description for the point-distribution pass."""

from __future__ import annotations

from dataclasses import dataclass, field

from .bounds import Bounds

MAX_POINTS_PER_NODE = 100000
BUF_SIZE = 4096 * 10
MAX_BUFFERS = 1000
NUM_WRITERS = 4
NUM_FILE_PROCESSORS = 8


@dataclass
class EpfFileInfo:
    """Describes one input point-cloud file (or a chunk of one)."""

    filename: str = ""
    driver: str = ""
    dim_info: list = field(default_factory=list)
    num_points: int = 0
    start: int = 0
    bounds: Bounds = field(default_factory=Bounds)
    srs: str = ""

    def valid(self) -> bool:
        """True once a filename has been set."""
        return bool(self.filename)