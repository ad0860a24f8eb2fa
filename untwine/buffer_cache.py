"""A bounded pool of reusable point-data buffers."""

from __future__ import annotations

import threading
from collections import deque

from .epf_types import BUF_SIZE, MAX_BUFFERS


class BufferCache:
    """Hand out data buffers, creating at most ``max_buffers`` of them.

    Once that many exist, callers wait until one is handed back with
    :meth:`replace`. The cache can share a lock with its owner so that the
    owner can examine its own state and fetch atomically.
    """

    def __init__(self, lock: threading.RLock | None = None,
                 max_buffers: int = MAX_BUFFERS, buf_size: int = BUF_SIZE):
        self._cv = threading.Condition(lock if lock is not None else threading.RLock())
        self._buffers: deque[bytearray] = deque()
        self._count = 0
        self.max_buffers = max_buffers
        self.buf_size = buf_size

    @property
    def created(self) -> int:
        """Number of buffers created so far."""
        return self._count

    def fetch(self, nonblock: bool = False) -> bytearray | None:
        """Return a free buffer, creating one if the limit allows.

        If ``nonblock`` is true and no buffer is available, return None
        instead of waiting.
        """
        with self._cv:
            if nonblock and not self._buffers and self._count >= self.max_buffers:
                return None
            self._cv.wait_for(lambda: self._buffers or self._count < self.max_buffers)
            if self._buffers:
                return self._buffers.pop()
            self._count += 1
            return bytearray(self.buf_size)

    def replace(self, buf: bytearray) -> None:
        """Give a buffer back to the cache."""
        with self._cv:
            self._buffers.append(buf)
            if self._count == self.max_buffers:
                self._cv.notify()