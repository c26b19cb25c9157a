import pytest

from chunkio import BytesResource, ChunkStream, RetryPolicy, Whence
from chunkio.exceptions import ClosedForReadingError, OperationNotSupportedError

DATA = b"0123456789abcdef"


def create_stream(data: bytes = DATA, chunk_size: int = 8192) -> ChunkStream:
    return ChunkStream(BytesResource(data, chunk_size=chunk_size), retry=RetryPolicy(interval=0))


def test_seek_and_read():
    stream = create_stream()
    assert stream.seek(10) == 10
    assert stream.tell() == 10
    assert stream.read(3) == b"abc"
    assert stream.tell() == 13


def test_seek_discards_pushed_back_data():
    stream = create_stream(b"hello world")
    assert stream.read(5) == b"hello"
    stream.ungetc("Z")
    stream.seek(6)
    assert stream.read(5) == b"world"
    stream.seek(0)
    assert stream.read(1) == b"h"


def test_seek_clears_eof():
    stream = create_stream(b"abc")
    assert stream.read() == b"abc"
    assert stream.read() is None
    assert stream.eof
    stream.seek(1)
    assert not stream.eof
    assert stream.read() == b"bc"


def test_seek_relative_to_logical_position():
    # The first read pulls the whole resource into the push-back buffer, so
    # the resource's own position is ahead of the stream's.
    stream = create_stream(b"0123456789")
    assert stream.read(2) == b"01"
    assert stream.seek(3, Whence.CUR) == 5
    assert stream.read(1) == b"5"


def test_seek_from_end():
    stream = create_stream(b"0123456789")
    assert stream.seek(-2, Whence.END) == 8
    assert stream.read() == b"89"


def test_negative_seek_rejected():
    stream = create_stream()
    with pytest.raises(ValueError):
        stream.seek(-1)


def test_pos_setter():
    stream = create_stream()
    stream.pos = 4
    assert stream.pos == 4
    assert stream.read(2) == b"45"


def test_rewind_resets_line_number():
    stream = create_stream(b"a\nb\n")
    assert stream.gets() == "a\n"
    assert stream.gets() == "b\n"
    assert stream.lineno == 2
    assert stream.rewind() == 0
    assert stream.lineno == 0
    assert stream.tell() == 0
    assert stream.gets() == "a\n"


def test_pread_keeps_position():
    stream = create_stream(chunk_size=4)
    assert stream.read(3) == b"012"
    assert stream.pread(4, 10) == b"abcd"
    assert stream.tell() == 3
    assert stream.read(3) == b"345"


def test_pread_appends_to_buffer():
    stream = create_stream()
    target = bytearray()
    assert stream.pread(2, 14, target) == b"ef"
    assert target == bytearray(b"ef")
    assert stream.tell() == 0


def test_pwrite_keeps_position():
    resource = BytesResource(DATA)
    stream = ChunkStream(resource, retry=RetryPolicy(interval=0))
    assert stream.read(3) == b"012"
    assert stream.pwrite(b"XY", 10) == 2
    assert stream.tell() == 3
    assert resource.getvalue() == b"0123456789XYcdef"
    assert stream.read(3) == b"345"


def test_pread_restores_position_on_error():
    stream = create_stream()
    stream.read(2)
    stream.close_read()
    with pytest.raises(ClosedForReadingError):
        stream.pread(2, 5)
    assert stream.tell() == 2


def test_seek_on_non_seekable_resource(make_stream):
    stream = make_stream(b"abc")
    assert not stream.seekable()
    with pytest.raises(OperationNotSupportedError):
        stream.seek(0)
    with pytest.raises(OperationNotSupportedError):
        stream.pread(1, 0)


def test_seekable():
    stream = create_stream()
    assert stream.seekable()
    stream.close()
    assert not stream.seekable()
