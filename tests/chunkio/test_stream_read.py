import io

import pytest

from chunkio import BytesResource, ChunkListResource, ChunkStream, ResourceBase, RetryPolicy
from chunkio.exceptions import ClosedForReadingError, UnexpectedEOFError

NO_WAIT = RetryPolicy(interval=0)


class LoopbackResource(ResourceBase):
    """Returns written data back to the reader, a few bytes at a time."""

    def __init__(self, chunk_size: int = 3):
        self._pending = bytearray()
        self.chunk_size = chunk_size

    def read(self):
        if not self._pending:
            return None
        chunk = bytes(self._pending[: self.chunk_size])
        del self._pending[: self.chunk_size]
        return chunk

    def write(self, data, /):
        self._pending.extend(data)
        return len(data)


def test_read_everything_then_sentinel(make_stream):
    stream = make_stream(b"ab", b"")
    assert stream.read() == b"ab"
    assert stream.read() is None
    assert stream.eof


def test_read_joins_chunks(make_stream):
    stream = make_stream(b"ab", b"cd", b"ef")
    assert stream.read() == b"abcdef"
    assert stream.tell() == 6
    assert stream.eof


def test_split_chunk_across_reads():
    resource = ChunkListResource([b"abcdef"])
    stream = ChunkStream(resource, retry=NO_WAIT)

    assert stream.read(2) == b"ab"
    assert stream.tell() == 2
    assert stream.read(4) == b"cdef"
    assert stream.tell() == 6
    assert resource.reads == 1


def test_bounded_read_spanning_chunks(make_stream):
    stream = make_stream(b"ab", b"cd", b"ef")
    assert stream.read(3) == b"abc"
    assert stream.read(2) == b"de"
    assert stream.read(5) == b"f"
    assert stream.read(1) is None


def test_read_zero_does_not_touch_resource():
    resource = ChunkListResource([b"abc"])
    stream = ChunkStream(resource, retry=NO_WAIT)
    assert stream.read(0) == b""
    assert resource.reads == 0


def test_negative_size_reads_everything(make_stream):
    stream = make_stream(b"ab", b"cd")
    assert stream.read(-1) == b"abcd"


def test_read_appends_to_buffer(make_stream):
    stream = make_stream(b"hello", b" world")
    target = bytearray(b">")
    assert stream.read(5, target) == b"hello"
    assert target == bytearray(b">hello")

    out = io.BytesIO()
    stream.read(None, out)
    assert out.getvalue() == b" world"


def test_read_buffer_rejects_unknown_targets(make_stream):
    stream = make_stream(b"abc")
    with pytest.raises(TypeError):
        stream.read(1, object())


def test_empty_stream(make_stream):
    stream = make_stream()
    assert stream.read() is None
    assert stream.eof
    assert stream.tell() == 0


def test_readpartial_and_aliases(make_stream):
    stream = make_stream(b"abcdef")
    assert stream.readpartial(2) == b"ab"
    assert stream.sysread(2) == b"cd"
    assert stream.read_nonblock(2) == b"ef"


def test_pushback_then_read(make_stream):
    stream = make_stream(b"abc")
    assert stream.read(1) == b"a"
    before = stream.tell()

    stream.ungetc("X")
    assert stream.tell() == before - 1
    assert stream.read(1) == b"X"
    assert stream.tell() == before
    assert stream.read() == b"bc"


@pytest.mark.parametrize("data", [b"x", b"pushed back", bytes(range(256))])
def test_pushback_is_returned_once(make_stream, data):
    stream = make_stream(b"tail", b"")
    stream.ungetbyte(data)
    result = stream.read(len(data) + 4)
    assert result == data + b"tail"
    assert stream.read() is None


def test_pushback_order(make_stream):
    stream = make_stream(b"c")
    stream.ungetbyte(ord("b"))
    stream.ungetbyte(b"a")
    assert stream.read() == b"abc"


def test_pushback_at_eof(make_stream):
    stream = make_stream(b"ab", b"")
    assert stream.read() == b"ab"
    assert stream.eof

    stream.ungetc("b")
    assert not stream.eof
    assert stream.read() == b"b"
    assert stream.eof


def test_ungetc_encodes_characters(make_stream):
    stream = make_stream(b"")
    stream.ungetc("é")
    assert stream.read() == "é".encode("utf-8")

    stream.ungetc(0x263A)
    assert stream.read() == "☺".encode("utf-8")


def test_getbyte_and_readbyte(make_stream):
    stream = make_stream(b"\x00\xff")
    assert stream.getbyte() == 0
    assert stream.readbyte() == 255
    assert stream.getbyte() is None
    with pytest.raises(UnexpectedEOFError):
        stream.readbyte()


def test_getc_reads_whole_characters(make_stream):
    stream = make_stream(b"a\xc3", b"\xa9b")
    assert stream.getc() == "a"
    assert stream.getc() == "é"
    assert stream.getc() == "b"
    assert stream.getc() is None
    with pytest.raises(UnexpectedEOFError):
        stream.readchar()


def test_getc_truncated_character(make_stream):
    stream = make_stream(b"a\xc3")
    assert stream.getc() == "a"
    with pytest.raises(UnicodeDecodeError):
        stream.getc()
    assert stream.tell() == 1
    assert stream.read() == b"\xc3"


def test_getc_truncated_character_replaced(make_stream):
    stream = make_stream(b"a\xc3", errors="replace")
    assert stream.readchar() == "a"
    assert stream.readchar() == "\ufffd"
    assert stream.getc() is None


@pytest.mark.parametrize("data", [b"", b"a", b"round trip", bytes(range(256)) * 3])
def test_write_then_read_round_trip(data):
    resource = LoopbackResource()
    stream = ChunkStream(resource, retry=NO_WAIT)
    stream.write(data)
    if data:
        assert stream.read(len(data)) == data
    assert stream.tell() == len(data)


def test_read_when_closed_for_reading(make_stream):
    stream = make_stream(b"abc")
    stream.close_read()
    with pytest.raises(ClosedForReadingError):
        stream.read()
    with pytest.raises(ClosedForReadingError):
        stream.each_chunk()
    with pytest.raises(ClosedForReadingError):
        stream.ungetc("x")


def test_position_with_bytes_resource():
    stream = ChunkStream(BytesResource(b"0123456789", chunk_size=4), retry=NO_WAIT)
    assert stream.read(5) == b"01234"
    assert stream.tell() == 5
    assert stream.read(3) == b"567"
    assert stream.tell() == 8
    assert stream.read() == b"89"
    assert stream.tell() == 10
