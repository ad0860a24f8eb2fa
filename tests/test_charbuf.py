import os

import pytest

from untwine.charbuf import CharBuffer, OpenMode


def test_write_then_read_round_trip():
    backing = bytearray(8)
    cb = CharBuffer(backing)
    assert cb.write(b"abcdefgh") == 8
    assert cb.read(3) == b"abc"
    assert cb.read() == b"defgh"


def test_write_reaches_backing_buffer():
    backing = bytearray(4)
    cb = CharBuffer(backing)
    cb.write(b"xy")
    assert bytes(backing[:2]) == b"xy"
    assert cb.put_pos == 2


def test_write_truncates_at_end():
    cb = CharBuffer(bytearray(3))
    assert cb.write(b"hello") == 3
    assert cb.write(b"z") == 0


def test_seekpos_uses_offset():
    cb = CharBuffer(bytearray(b"0123456789"), buf_offset=100)
    assert cb.seekpos(104) == 4
    assert cb.read(2) == b"45"


def test_seekpos_read_past_end_fails_but_write_allowed():
    cb = CharBuffer(bytearray(5))
    with pytest.raises(ValueError):
        cb.seekpos(5, OpenMode.IN)
    assert cb.seekpos(5, OpenMode.OUT) == 5
    with pytest.raises(ValueError):
        cb.seekpos(6, OpenMode.OUT)


def test_seekpos_before_offset_fails():
    cb = CharBuffer(bytearray(5), buf_offset=10)
    with pytest.raises(ValueError):
        cb.seekpos(9)


def test_seekoff_current_and_end():
    cb = CharBuffer(bytearray(b"abcdef"))
    cb.read(1)
    assert cb.seekoff(2, os.SEEK_CUR, OpenMode.IN) == 3
    assert cb.read(1) == b"d"
    cb.seekoff(2, os.SEEK_END, OpenMode.IN)
    assert cb.read() == b"ef"


def test_seekoff_set_with_offset_for_write():
    backing = bytearray(b"......")
    cb = CharBuffer(backing, buf_offset=50)
    assert cb.seekoff(52, os.SEEK_SET, OpenMode.OUT) == 2
    cb.write(b"ab")
    assert bytes(backing) == b"..ab.."


def test_seekoff_out_of_range_raises():
    cb = CharBuffer(bytearray(4))
    with pytest.raises(ValueError):
        cb.seekoff(-1, os.SEEK_CUR)
    with pytest.raises(ValueError):
        cb.seekoff(5, os.SEEK_END)


def test_seekoff_bad_whence_raises():
    cb = CharBuffer(bytearray(4))
    with pytest.raises(ValueError):
        cb.seekoff(0, 99)


def test_empty_buffer():
    cb = CharBuffer()
    assert cb.size == 0
    assert cb.read() == b""
    assert cb.write(b"x") == 0


def test_initialize_resets_positions():
    cb = CharBuffer(bytearray(b"abc"))
    cb.read(2)
    cb.initialize(bytearray(b"xyz"))
    assert cb.get_pos == 0
    assert cb.read() == b"xyz"