"""Octants and the point files that belong to them during pyramid building.

Voxel keys are tuples ``(x, y, z, level)``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

_MERGE_THRESHOLD = 1500


def _key_name(key: tuple[int, int, int, int]) -> str:
    x, y, z, level = key
    return f"{level}-{x}-{y}-{z}"


@dataclass
class FileInfo:
    """A temporary file of fixed-size point records."""

    filename: str
    num_points: int
    start: int = 0
    context: Any = None


@dataclass
class OctantInfo:
    """A voxel together with the files that hold its points."""

    key: tuple[int, int, int, int] = (0, 0, 0, 0)
    file_infos: list[FileInfo] = field(default_factory=list)
    must_write: bool = False

    def append_file_info(self, info: FileInfo) -> None:
        self.file_infos.append(info)

    def prepend_file_info(self, info: FileInfo) -> None:
        self.file_infos.insert(0, info)

    def append_file_infos(self, other: OctantInfo) -> None:
        """Move all of ``other``'s file infos to the end of this octant's list."""
        self.file_infos.extend(other.file_infos)
        other.file_infos.clear()

    def num_points(self) -> int:
        return sum(fi.num_points for fi in self.file_infos)

    def has_points(self) -> bool:
        return any(fi.num_points for fi in self.file_infos)

    def merge_small_files(self, temp_dir: str | os.PathLike, point_size: int) -> None:
        """Combine files with fewer than 1500 points into one merge file."""
        base_name = _key_name(self.key) + "_merge.bin"
        merge_path = os.path.join(temp_dir, base_name)
        try:
            out = open(merge_path, "wb")
        except OSError as err:
            raise OSError(f"Couldn't open temporary merge file '{merge_path}'.") from err

        total = 0
        kept: list[FileInfo] = []
        with out:
            for fi in self.file_infos:
                if fi.num_points >= _MERGE_THRESHOLD:
                    kept.append(fi)
                    continue
                size = fi.num_points * point_size
                path = os.path.join(temp_dir, fi.filename)
                try:
                    with open(path, "rb") as f:
                        data = f.read(size)
                except OSError as err:
                    raise OSError(f"Couldn't open file '{path}' to merge.") from err
                out.write(data.ljust(size, b"\0"))
                total += fi.num_points
        self.file_infos = kept
        # An empty merge file would later fail to map, so only list it if it has points.
        if total > 0:
            self.file_infos.append(FileInfo(base_name, total))