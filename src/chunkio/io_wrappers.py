"""Adapters exposing a :class:`~chunkio.ChunkStream` as a standard library file object."""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Optional, TextIO

from chunkio.stream import ChunkStream

logger = logging.getLogger(__name__)


class ChunkStreamRawIO(io.RawIOBase, BinaryIO):
    """
    Wraps a ChunkStream so it can be used wherever a ``BinaryIO`` is expected,
    e.g. with :class:`io.BufferedReader` or :class:`io.TextIOWrapper`.

    The end of the stream is reported as ``b""`` instead of None, as the io
    module expects.
    """

    def __init__(self, stream: ChunkStream, *, close_stream: bool = True):
        super().__init__()
        self._stream = stream
        self._close_stream = close_stream

    @property
    def stream(self) -> ChunkStream:
        return self._stream

    # Basic IO methods -------------------------------------------------
    def read(self, size: int = -1) -> bytes:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        data = self._stream.read(None if size is None or size < 0 else size)
        return b"" if data is None else data

    def readall(self) -> bytes:
        return self.read(-1)

    def readinto(self, b: bytearray | memoryview) -> int:  # type: ignore[override]
        data = self.read(len(b))
        n = len(data)
        b[:n] = data
        return n

    def write(self, b: Any) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        return self._stream.write(bytes(b))

    # Seek/Tell --------------------------------------------------------
    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if not self._stream.seekable():
            raise io.UnsupportedOperation("seek")
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        return self._stream.tell()

    # Properties -------------------------------------------------------
    def readable(self) -> bool:
        return self._stream.readable()

    def writable(self) -> bool:
        return self._stream.writable()

    def seekable(self) -> bool:
        return self._stream.seekable()

    def fileno(self) -> int:
        try:
            return self._stream.fileno()
        except NotImplementedError as e:
            raise io.UnsupportedOperation("fileno") from e

    def isatty(self) -> bool:
        return self._stream.isatty()

    # Control methods --------------------------------------------------
    def close(self) -> None:
        if self.closed:
            return
        if self._close_stream:
            self._stream.close()
        super().close()

    def __repr__(self) -> str:
        return f"ChunkStreamRawIO({self._stream!r})"


def ensure_bufferedio(stream: ChunkStream) -> io.BufferedReader:
    """Return a buffered binary reader over ``stream``."""
    return io.BufferedReader(ChunkStreamRawIO(stream))


def open_text(
    stream: ChunkStream,
    *,
    encoding: Optional[str] = None,
    errors: Optional[str] = None,
    newline: Optional[str] = None,
) -> TextIO:
    """Return a text file object over ``stream``.

    The encoding and error handler default to the stream's own configuration.
    """
    encoding = encoding or stream.external_encoding
    errors = errors or stream.config.errors
    logger.debug("Opening %r as text (encoding=%s, errors=%s)", stream, encoding, errors)
    raw = ChunkStreamRawIO(stream)
    if raw.writable() and raw.readable():
        buffered: io.BufferedIOBase = io.BufferedRWPair(raw, raw)
    elif raw.writable():
        buffered = io.BufferedWriter(raw)
    else:
        buffered = io.BufferedReader(raw)
    return io.TextIOWrapper(buffered, encoding=encoding, errors=errors, newline=newline)
