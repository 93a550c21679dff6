import pytest

from argus.ringbuffer import RingBuffer


def test_basic():
    rb = RingBuffer(10)
    rb.write(b"hello")
    assert len(rb) == 5
    assert rb.getvalue() == b"hello"


def test_wrap():
    rb = RingBuffer(5)
    rb.write(b"abcde")
    rb.write(b"fg")
    assert len(rb) == 5
    assert rb.getvalue() == b"cdefg"


def test_large_write():
    rb = RingBuffer(4)
    rb.write(b"abcdefgh")
    assert len(rb) == 4
    assert rb.getvalue() == b"efgh"


def test_exact_fill():
    rb = RingBuffer(4)
    rb.write(b"abcd")
    assert rb.getvalue() == b"abcd"
    rb.write(b"e")
    assert rb.getvalue() == b"bcde"


def test_reset():
    rb = RingBuffer(10)
    rb.write(b"data")
    rb.reset()
    assert len(rb) == 0
    assert rb.getvalue() == b""


def test_reset_keeps_total_and_accepts_new_data():
    rb = RingBuffer(3)
    rb.write(b"abcd")
    rb.reset()
    rb.write(b"xy")
    assert rb.getvalue() == b"xy"
    assert rb.total_written() == 6


def test_empty():
    rb = RingBuffer(10)
    assert len(rb) == 0
    assert rb.getvalue() == b""


def test_total_written():
    rb = RingBuffer(5)
    assert rb.total_written() == 0
    rb.write(b"abc")
    assert rb.total_written() == 3
    rb.write(b"defgh")
    assert rb.total_written() == 8
    rb.write(b"ij")
    assert rb.total_written() == 10


def test_accepts_memoryview():
    rb = RingBuffer(3)
    rb.write(memoryview(b"12345"))
    assert rb.getvalue() == b"345"


@pytest.mark.parametrize("size", [0, -1])
def test_invalid_size(size):
    with pytest.raises(ValueError):
        RingBuffer(size)