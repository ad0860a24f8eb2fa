import pytest

from untwine.cell import Cell, CellManager
from untwine.epf_types import BUF_SIZE


class FakeWriter:
    def __init__(self, buf_size=8, fail_first=False):
        self.buf_size = buf_size
        self.fail_first = fail_first
        self.enqueued = []
        self.replaced = []
        self.blocking_fetches = 0

    def fetch_buffer(self):
        if self.fail_first:
            self.fail_first = False
            return None
        return bytearray(self.buf_size)

    def fetch_buffer_blocking(self):
        self.blocking_fetches += 1
        return bytearray(self.buf_size)

    def enqueue(self, key, data, size):
        self.enqueued.append((key, bytes(data[:size])))

    def replace(self, data):
        self.replaced.append(data)


def _noflush(cell):
    raise AssertionError("unexpected flush")


def test_full_buffer_is_enqueued():
    writer = FakeWriter(buf_size=8)
    key = (1, 1, 1, 2)
    cell = Cell(key, 4, writer, _noflush)
    cell.copy_point(b"abcd")
    cell.advance()
    assert writer.enqueued == []
    cell.copy_point(b"wxyz")
    cell.advance()
    assert writer.enqueued == [(key, b"abcdwxyz")]


def test_point_view_writes_into_buffer():
    writer = FakeWriter(buf_size=8)
    cell = Cell((0, 0, 0, 1), 4, writer, _noflush)
    cell.point()[:] = b"1234"
    cell.advance()
    cell.close()
    assert writer.enqueued == [((0, 0, 0, 1), b"1234")]


def test_close_empty_cell_replaces_buffer():
    writer = FakeWriter(buf_size=8)
    cell = Cell((0, 0, 0, 1), 4, writer, _noflush)
    cell.close()
    cell.close()
    assert len(writer.replaced) == 1
    assert writer.enqueued == []


def test_closed_cell_rejects_points():
    cell = Cell((0, 0, 0, 1), 4, FakeWriter(), _noflush)
    cell.close()
    with pytest.raises(ValueError):
        cell.copy_point(b"abcd")


def test_no_free_buffer_flushes_then_blocks():
    writer = FakeWriter(fail_first=True)
    flushed = []
    cell = Cell((0, 0, 0, 1), 4, writer, flushed.append)
    assert flushed == [cell]
    assert writer.blocking_fetches == 1
    cell.copy_point(b"abcd")
    cell.advance()
    cell.close()
    assert writer.enqueued == [((0, 0, 0, 1), b"abcd")]


def test_oversized_point_rejected():
    with pytest.raises(ValueError):
        Cell((0, 0, 0, 1), BUF_SIZE, FakeWriter(), _noflush)


def test_short_point_rejected():
    cell = Cell((0, 0, 0, 1), 4, FakeWriter(), _noflush)
    with pytest.raises(ValueError):
        cell.copy_point(b"ab")


def test_manager_returns_same_cell_per_key():
    mgr = CellManager(4, FakeWriter())
    a = mgr.get((0, 0, 0, 1))
    assert mgr.get((0, 0, 0, 1)) is a
    assert mgr.get((1, 0, 0, 1)) is not a
    assert len(mgr) == 2


def test_manager_flush_keeps_excluded_cell():
    writer = FakeWriter()
    mgr = CellManager(4, writer)
    keep = mgr.get((0, 0, 0, 1))
    other = mgr.get((1, 0, 0, 1))
    other.copy_point(b"dddd")
    other.advance()
    mgr.flush(keep)
    assert (0, 0, 0, 1) in mgr
    assert (1, 0, 0, 1) not in mgr
    assert writer.enqueued == [((1, 0, 0, 1), b"dddd")]
    assert mgr.get((0, 0, 0, 1)) is keep


def test_manager_close_releases_all():
    writer = FakeWriter()
    mgr = CellManager(4, writer)
    mgr.get((0, 0, 0, 1))
    mgr.get((1, 0, 0, 1))
    mgr.close()
    assert len(mgr) == 0
    assert len(writer.replaced) == 2


def test_manager_flush_during_creation_clears_others():
    writer = FakeWriter()
    mgr = CellManager(4, writer)
    mgr.get((0, 0, 0, 1))
    writer.fail_first = True
    new = mgr.get((1, 0, 0, 1))
    assert len(writer.replaced) == 1
    assert (0, 0, 0, 1) not in mgr
    assert mgr.get((1, 0, 0, 1)) is new