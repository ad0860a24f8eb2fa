"""Background writers that append filled cell buffers to per-voxel files.

Only one writer thread works on a given voxel file at a time, so data for
a voxel is appended in the order it was queued.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass

from .buffer_cache import BufferCache
from .epf_types import BUF_SIZE, MAX_BUFFERS, NUM_FILE_PROCESSORS

VoxelKey = tuple[int, int, int, int]


def _key_name(key: VoxelKey) -> str:
    x, y, z, level = key
    return f"{level}-{x}-{y}-{z}"


@dataclass
class _WriteData:
    key: VoxelKey
    data: bytearray
    size: int


class Writer:
    """A pool of threads writing queued buffers to ``<directory>/<key>.bin``."""

    def __init__(self, directory: str | os.PathLike, num_threads: int, point_size: int,
                 max_buffers: int = MAX_BUFFERS, buf_size: int = BUF_SIZE):
        self.directory = os.fspath(directory)
        self.point_size = point_size
        self._lock = threading.RLock()
        self._available = threading.Condition(self._lock)
        self._cache = BufferCache(self._lock, max_buffers, buf_size)
        self._stop = False
        self._queue: list[_WriteData] = []
        self._active: list[VoxelKey] = []
        self._totals: dict[VoxelKey, int] = {}
        self._errors: list[BaseException] = []
        self._threads = [threading.Thread(target=self._worker, daemon=True)
                         for _ in range(num_threads)]
        for thread in self._threads:
            thread.start()

    def __enter__(self) -> Writer:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def path(self, key: VoxelKey) -> str:
        """File that receives the points of voxel ``key``."""
        return f"{self.directory}/{_key_name(key)}.bin"

    def totals(self, min_size: int = 0) -> dict[VoxelKey, int]:
        """Point counts per voxel, keeping only those of at least ``min_size``."""
        with self._lock:
            return {k: v for k, v in self._totals.items() if v >= min_size}

    def fetch_buffer(self) -> bytearray | None:
        """Fetch a buffer; may return None when few writes are pending.

        The caller is then expected to flush its cells and fetch blocking.
        """
        with self._lock:
            return self._cache.fetch(len(self._queue) < NUM_FILE_PROCESSORS)

    def fetch_buffer_blocking(self) -> bytearray:
        """Fetch a buffer, waiting for one to be returned if necessary."""
        with self._lock:
            return self._cache.fetch(False)

    def enqueue(self, key: VoxelKey, data: bytearray, size: int) -> None:
        """Queue the first ``size`` bytes of ``data`` to be appended for ``key``."""
        with self._lock:
            self._totals[key] = self._totals.get(key, 0) + size // self.point_size
            self._queue.append(_WriteData(key, data, size))
            self._available.notify()

    def replace(self, data: bytearray) -> None:
        """Return an unused buffer to the cache."""
        with self._lock:
            self._cache.replace(data)

    def stop(self) -> None:
        """Finish all queued writes and stop the threads.

        Re-raises the first error any writer thread hit.
        """
        with self._lock:
            self._stop = True
            self._available.notify_all()
        for thread in self._threads:
            thread.join()
        with self._lock:
            errors, self._errors = self._errors, []
        if errors:
            raise errors[0]

    def _worker(self) -> None:
        try:
            self._run()
        except BaseException as err:  # handed to stop()
            with self._lock:
                self._errors.append(err)

    def _next(self) -> _WriteData | None:
        with self._lock:
            while True:
                for i, wd in enumerate(self._queue):
                    if wd.key not in self._active:
                        self._active.append(wd.key)
                        return self._queue.pop(i)
                if self._stop:
                    return None
                self._available.wait()

    def _run(self) -> None:
        while (wd := self._next()) is not None:
            target = self.path(wd.key)
            try:
                with open(target, "ab") as out:
                    out.write(memoryview(wd.data)[:wd.size])
            except OSError as err:
                raise OSError(f"Failure writing to '{target}'.") from err
            with self._lock:
                self._cache.replace(wd.data)
                self._active.remove(wd.key)
                self._available.notify_all()