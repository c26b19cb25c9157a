"""
The buffering, retry and iteration engine that turns a primitive resource into
a rich stream.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator, Optional, TypeVar, Union

from typing_extensions import Buffer

from chunkio.buffer import PushbackBuffer
from chunkio.config import ChunkIOConfig, resolve_config
from chunkio.encoding import EncodingNormalizer
from chunkio.exceptions import (
    ClosedForReadingError,
    ClosedForWritingError,
    OperationNotSupportedError,
    UnexpectedEOFError,
)
from chunkio.resources import is_seekable
from chunkio.retry import ChunkRetriever
from chunkio.state import StreamState
from chunkio.types import PrimitiveResource, ReadAdvice, Whence

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Distinguishes "use the configured line separator" from an explicit None,
# which means "read the rest of the stream".
_DEFAULT_SEPARATOR: Any = object()


def _drive(
    iterator: Iterator[T], callback: Optional[Callable[[T], Any]]
) -> Optional[Iterator[T]]:
    """Return ``iterator`` itself, or feed every item to ``callback`` if given."""
    if callback is None:
        return iterator
    for item in iterator:
        callback(item)
    return None


def _append_to(target: Any, data: bytes) -> None:
    if hasattr(target, "extend"):
        target.extend(data)
    elif hasattr(target, "write"):
        target.write(data)
    else:
        raise TypeError(f"cannot append data to {type(target).__name__} object")


class ChunkStream:
    """
    A file-like stream built on top of a :class:`~chunkio.types.PrimitiveResource`.

    The resource only needs to produce chunks of data one at a time; the stream
    takes care of bounded reads, push-back, line, character, byte and codepoint
    iteration, positional reads and writes, and converting everything into the
    configured external encoding.

    The resource is opened when the stream is constructed. Streams are not
    thread-safe: callers must serialize access to a single instance.
    """

    def __init__(
        self,
        resource: PrimitiveResource,
        config: Optional[ChunkIOConfig] = None,
        *,
        cancel: Optional[threading.Event] = None,
        **config_overrides: Any,
    ):
        """
        Open ``resource`` and wrap it in a stream.

        Args:
            resource: The object providing the primitive ``open``, ``read``,
                ``write``, ``seek`` and ``close`` operations.
            config: The configuration to use. If None, the current default
                configuration (see :func:`chunkio.config.get_default_config`)
                is used.
            cancel: An optional event; when it is set, a read that is waiting
                for the resource to produce data raises ``ReadCancelledError``.
            **config_overrides: Fields of :class:`ChunkIOConfig` to override,
                e.g. ``encoding="latin-1"``.
        """
        self.resource = resource
        self.config = resolve_config(config, **config_overrides)
        self._normalizer = EncodingNormalizer(
            self.config.encoding, self.config.errors, self.config.source_encoding
        )
        self._state = StreamState(encoding=self._normalizer.encoding)
        self._buffer = PushbackBuffer()
        self._retriever = ChunkRetriever(resource.read, self.config.retry, cancel)
        self._open()

    def _open(self) -> ChunkStream:
        self._buffer.clear()
        handle = self.resource.open()
        self._state.reset(handle)
        logger.debug("Opened %r (handle %r)", self.resource, handle)
        return self

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def pos(self) -> int:
        """The number of bytes logically consumed from the start of the stream."""
        return self._state.pos

    @pos.setter
    def pos(self, new_pos: int) -> None:
        self.seek(new_pos, Whence.SET)

    def tell(self) -> int:
        return self._state.pos

    @property
    def eof(self) -> bool:
        """Whether the stream is at its end.

        True once the resource has signalled the end of the stream and no
        pushed-back data is pending. This does not probe the resource: after
        reading exactly the remaining data, it only becomes true once a further
        read hits the end.
        """
        return self._state.eof and self._buffer.is_empty()

    @property
    def lineno(self) -> int:
        """How many times :meth:`gets` has been called since opening or rewinding."""
        if not self._state.readable:
            raise ClosedForReadingError("not opened for reading")
        return self._state.lineno

    @lineno.setter
    def lineno(self, number: int) -> None:
        if not self._state.readable:
            raise ClosedForReadingError("not opened for reading")
        self._state.lineno = int(number)

    @property
    def external_encoding(self) -> str:
        return self._state.encoding

    @external_encoding.setter
    def external_encoding(self, encoding: str) -> None:
        self._normalizer = EncodingNormalizer(
            encoding, self.config.errors, self.config.source_encoding
        )
        self._state.encoding = self._normalizer.encoding

    @property
    def closed(self) -> bool:
        return self._state.closed

    @property
    def handle(self) -> Any:
        """The opaque handle returned by the resource's ``open()``."""
        return self._state.handle

    @property
    def pid(self) -> Optional[int]:
        return self._state.pid

    def readable(self) -> bool:
        return self._state.readable

    def writable(self) -> bool:
        return self._state.writable

    def seekable(self) -> bool:
        return not self._state.closed and is_seekable(self.resource)

    def _check_readable(self) -> None:
        if not self._state.readable:
            raise ClosedForReadingError("closed for reading")

    def _check_writable(self) -> None:
        if not self._state.writable:
            raise ClosedForWritingError("closed for writing")

    # ------------------------------------------------------------------
    # Push-back buffer
    # ------------------------------------------------------------------
    def _take_buffer(self, size: Optional[int] = None) -> bytes:
        data = self._buffer.take(size)
        self._state.pos += len(data)
        return data

    def _unread(self, data: bytes) -> None:
        if not data:
            return
        self._buffer.prepend(data)
        self._state.pos -= len(data)

    def ungetbyte(self, byte: Union[int, bytes, bytearray, str]) -> None:
        """Push a byte (or a byte string) back so it is returned by the next read."""
        self._check_readable()
        if isinstance(byte, int):
            data = bytes([byte])
        elif isinstance(byte, str):
            data = self._normalizer.encode(byte)
        else:
            data = bytes(byte)
        self._unread(data)

    def ungetc(self, char: Union[str, int, bytes, bytearray]) -> None:
        """Push a character back so it is returned by the next read.

        Integers are interpreted as codepoints; strings are encoded with the
        external encoding.
        """
        self._check_readable()
        if isinstance(char, int):
            char = chr(char)
        if isinstance(char, str):
            data = self._normalizer.encode(char)
        else:
            data = bytes(char)
        self._unread(data)

    # ------------------------------------------------------------------
    # Chunk retrieval
    # ------------------------------------------------------------------
    def _chunks(self) -> Iterator[bytes]:
        while True:
            # Data pushed back while the iteration is suspended comes first.
            if not self._buffer.is_empty():
                yield self._take_buffer()
                continue

            if self._state.eof:
                return

            self._check_readable()
            raw = self._retriever.next_chunk()

            if not raw:
                if raw is not None:
                    logger.debug("Short read at position %d", self._state.pos)
                self._state.eof = True
                tail = self._normalizer.flush()
                if tail:
                    self._state.pos += len(tail)
                    yield tail
                return

            chunk = self._normalizer.normalize(raw)
            if chunk:
                self._state.pos += len(chunk)
                yield chunk

    def each_chunk(
        self, callback: Optional[Callable[[bytes], Any]] = None
    ) -> Optional[Iterator[bytes]]:
        """
        Iterate over the chunks of the stream, starting with any pushed-back data.

        Args:
            callback: If given, it is called with every chunk and None is
                returned. Otherwise a lazy iterator is returned.

        Raises:
            ClosedForReadingError: If the stream is closed for reading.
        """
        self._check_readable()
        return _drive(self._chunks(), callback)

    # ------------------------------------------------------------------
    # Bounded reads
    # ------------------------------------------------------------------
    def read(self, size: Optional[int] = None, buffer: Any = None) -> Optional[bytes]:
        """
        Read up to ``size`` bytes from the stream.

        Pushed-back data is returned first; then chunks are pulled from the
        resource until ``size`` bytes have been collected or the stream ends. A
        chunk that goes past ``size`` is split, and its remainder is kept for
        the next read.

        Args:
            size: The maximum number of bytes to read. If None or negative, the
                whole remaining stream is read.
            buffer: An optional ``bytearray`` (or object with ``extend()`` or
                ``write()``) to which the data read is also appended.

        Returns:
            The data read, or None if the stream is at its end and no data was
            produced.

        Raises:
            ClosedForReadingError: If the stream is closed for reading.
        """
        self._check_readable()
        if size is not None and size < 0:
            size = None
        if size == 0:
            return b""

        result = bytearray()
        remaining = size

        if not self._buffer.is_empty():
            result += self._take_buffer(remaining)
            if remaining is not None:
                remaining -= len(result)

        if remaining is None or remaining > 0:
            for chunk in self._chunks():
                if remaining is not None and len(chunk) > remaining:
                    result += chunk[:remaining]
                    self._unread(chunk[remaining:])
                    break

                result += chunk
                if remaining is not None:
                    remaining -= len(chunk)
                    if remaining == 0:
                        break

        if not result:
            return None

        data = bytes(result)
        if buffer is not None:
            _append_to(buffer, data)
        return data

    sysread = read
    read_nonblock = read

    def readpartial(self, size: int, buffer: Any = None) -> Optional[bytes]:
        return self.read(size, buffer)

    def getbyte(self) -> Optional[int]:
        """Read a single byte, returning None at the end of the stream."""
        data = self.read(1)
        if data is None:
            return None
        return data[0]

    def readbyte(self) -> int:
        byte = self.getbyte()
        if byte is None:
            raise UnexpectedEOFError("end of stream reached")
        return byte

    def getc(self) -> Optional[str]:
        """
        Read a single character in the external encoding.

        Bytes are read one at a time until they decode into a character, so a
        multi-byte character split across chunks is returned whole. Returns
        None at the end of the stream.
        """
        return self._read_char()[0]

    def _read_char(self) -> tuple[Optional[str], bytes]:
        """Read one character, along with the raw bytes it was decoded from.

        If decoding fails, the bytes read so far are pushed back before the
        error propagates.
        """
        decoder = self._normalizer.decoder()
        raw = bytearray()
        try:
            while True:
                data = self.read(1)
                if data is None:
                    if not raw:
                        return None, b""
                    # Raises UnicodeDecodeError for a truncated sequence, unless
                    # the error handler replaces or ignores it.
                    text = decoder.decode(b"", final=True)
                else:
                    raw += data
                    text = decoder.decode(data)

                if text:
                    if len(text) > 1:
                        rest = self._normalizer.encode(text[1:])
                        self._unread(rest)
                        del raw[max(len(raw) - len(rest), 0) :]
                    return text[0], bytes(raw)
                if data is None:
                    return None, bytes(raw)
        except Exception:
            self._unread(bytes(raw))
            raise

    def readchar(self) -> str:
        char = self.getc()
        if char is None:
            raise UnexpectedEOFError("end of stream reached")
        return char

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------
    def _decode(self, data: bytes) -> str:
        return data.decode(self._state.encoding, self.config.errors)

    def gets(self, separator: Union[str, bytes, None] = _DEFAULT_SEPARATOR) -> Optional[str]:
        """
        Read a line ending with ``separator``.

        Increments :attr:`lineno`. The line is returned including the separator;
        the last line of the stream is returned without it if the stream does
        not end with a separator.

        Args:
            separator: The string that terminates the line. Defaults to the
                configured line separator. If None, the rest of the stream is
                returned as a single line (None if nothing is left).

        Raises:
            UnexpectedEOFError: If the stream ended before any character could
                be read.
            UnicodeDecodeError: If the line cannot be decoded. The stream is left
                at the start of the line.
        """
        self._check_readable()
        if separator is _DEFAULT_SEPARATOR:
            separator = self.config.line_separator

        self._state.lineno += 1

        if separator is None:
            data = self.read()
            return None if data is None else self._decode(data)

        if isinstance(separator, (bytes, bytearray)):
            separator = self._decode(bytes(separator))
        if not separator:
            raise ValueError("separator must not be empty")

        line = ""
        raw = bytearray()
        try:
            while True:
                char, data = self._read_char()
                if char is None:
                    break
                raw += data
                line += char
                if line.endswith(separator):
                    break
        except Exception:
            # Leave the stream where the line started.
            self._unread(bytes(raw))
            self._state.lineno -= 1
            raise

        if not line:
            # A line should at least contain the separator.
            raise UnexpectedEOFError("end of stream reached")
        return line

    def readline(self, separator: Union[str, bytes, None] = _DEFAULT_SEPARATOR) -> str:
        line = self.gets(separator)
        if line is None:
            raise UnexpectedEOFError("end of stream reached")
        return line

    def _lines(self, separator: Union[str, bytes, None]) -> Iterator[str]:
        while True:
            try:
                line = self.gets(separator)
            except UnexpectedEOFError:
                return
            if line is None:
                return
            yield line

    def each_line(
        self,
        separator: Union[str, bytes, None] = _DEFAULT_SEPARATOR,
        callback: Optional[Callable[[str], Any]] = None,
    ) -> Optional[Iterator[str]]:
        """Iterate over the lines of the stream; see :meth:`gets`."""
        self._check_readable()
        return _drive(self._lines(separator), callback)

    def readlines(self, separator: Union[str, bytes, None] = _DEFAULT_SEPARATOR) -> list[str]:
        self._check_readable()
        return list(self._lines(separator))

    def __iter__(self) -> Iterator[str]:
        self._check_readable()
        return self._lines(_DEFAULT_SEPARATOR)

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------
    # Units are taken one at a time through read() and getc().
    def _bytes(self) -> Iterator[int]:
        while True:
            data = self.read(1)
            if data is None:
                return
            yield data[0]

    def each_byte(
        self, callback: Optional[Callable[[int], Any]] = None
    ) -> Optional[Iterator[int]]:
        self._check_readable()
        return _drive(self._bytes(), callback)

    def _chars(self) -> Iterator[str]:
        while True:
            char = self.getc()
            if char is None:
                return
            yield char

    def each_char(
        self, callback: Optional[Callable[[str], Any]] = None
    ) -> Optional[Iterator[str]]:
        """
        Iterate over the characters of the stream, decoded with the external
        encoding.

        Each character is read with :meth:`getc`, so reads interleaved with the
        iteration, or abandoning it, never skip data.
        """
        self._check_readable()
        return _drive(self._chars(), callback)

    def _codepoints(self) -> Iterator[int]:
        for char in self._chars():
            yield ord(char)

    def each_codepoint(
        self, callback: Optional[Callable[[int], Any]] = None
    ) -> Optional[Iterator[int]]:
        self._check_readable()
        return _drive(self._codepoints(), callback)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def _to_bytes(self, data: Any) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        if not isinstance(data, str):
            data = str(data)
        return self._normalizer.encode(data)

    def write(self, data: Union[Buffer, str, Any]) -> int:
        """
        Write ``data`` to the resource.

        Strings are encoded with the external encoding; other non-bytes objects
        are converted with ``str()`` first.

        Returns:
            The number of bytes accepted by the resource.

        Raises:
            ClosedForWritingError: If the stream is closed for writing.
        """
        self._check_writable()
        return self.resource.write(self._to_bytes(data))

    syswrite = write
    write_nonblock = write

    def putc(self, data: Union[int, str, bytes]) -> Union[int, str, bytes]:
        """Write a single byte (for ints and bytes) or character (for strings)."""
        if isinstance(data, int):
            unit: Union[bytes, str] = bytes([data & 0xFF])
        else:
            unit = data[:1]
        self.write(unit)
        return data

    def print(self, *args: Any) -> None:
        for data in args:
            self.write(data)

    def puts(self, *args: Any) -> None:
        """Write each argument followed by the configured line separator."""
        separator = self.config.line_separator
        if not args:
            self.write(separator)
        for data in args:
            if isinstance(data, (bytes, bytearray, memoryview)):
                self.write(bytes(data) + self._normalizer.encode(separator))
            else:
                self.write(f"{data}{separator}")

    def printf(self, format_string: str, *args: Any) -> None:
        self.write(format_string % args)

    def flush(self) -> ChunkStream:
        return self

    def fsync(self) -> int:
        self.flush()
        return 0

    fdatasync = fsync

    # ------------------------------------------------------------------
    # Random access
    # ------------------------------------------------------------------
    def seek(self, offset: int, whence: int = Whence.SET) -> int:
        """
        Move to a new position, discarding any pushed-back data.

        ``Whence.CUR`` is resolved against the logical position of the stream
        (which may differ from the resource's own position when data has been
        read ahead or pushed back) and passed to the resource as an absolute
        seek.

        Returns:
            The new position.

        Raises:
            OperationNotSupportedError: If the resource cannot seek, or does not
                report its position after a seek relative to the end.
        """
        if whence == Whence.CUR:
            offset = self._state.pos + offset
            whence = Whence.SET
        if whence == Whence.SET and offset < 0:
            raise ValueError(f"negative seek position {offset}")

        seek = getattr(self.resource, "seek", None)
        if not callable(seek):
            raise OperationNotSupportedError(f"{type(self.resource).__name__} cannot seek")

        result = seek(offset, int(whence))
        self._buffer.clear()
        self._normalizer.reset()
        self._state.eof = False

        if whence == Whence.SET:
            new_pos = offset
        elif isinstance(result, int):
            new_pos = result
        elif callable(getattr(self.resource, "tell", None)):
            new_pos = self.resource.tell()  # type: ignore[attr-defined]
        else:
            raise OperationNotSupportedError(
                f"{type(self.resource).__name__} did not report its position after seek"
            )

        logger.debug("Seeked to %d (offset=%d, whence=%r)", new_pos, offset, whence)
        self._state.pos = new_pos
        return new_pos

    sysseek = seek

    def rewind(self) -> int:
        """Seek to the start of the stream and reset the line number."""
        self.seek(0, Whence.SET)
        self._state.lineno = 0
        return 0

    def pread(self, size: Optional[int], offset: int, buffer: Any = None) -> Optional[bytes]:
        """Read up to ``size`` bytes at ``offset`` without changing :attr:`pos`."""
        saved_pos = self._state.pos
        self.seek(offset, Whence.SET)
        try:
            return self.read(size, buffer)
        finally:
            self.seek(saved_pos, Whence.SET)

    def pwrite(self, data: Union[Buffer, str, Any], offset: int) -> int:
        """Write ``data`` at ``offset`` without changing :attr:`pos`."""
        saved_pos = self._state.pos
        self.seek(offset, Whence.SET)
        try:
            return self.write(data)
        finally:
            self.seek(saved_pos, Whence.SET)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close_read(self) -> None:
        """Close the read side; the whole stream is closed if it is not writable."""
        if self._state.closed or not self._state.readable:
            return
        if self._state.writable:
            logger.debug("Closing read side of %r", self)
            self._state.readable = False
        else:
            self.close()

    def close_write(self) -> None:
        """Close the write side; the whole stream is closed if it is not readable."""
        if self._state.closed or not self._state.writable:
            return
        if self._state.readable:
            logger.debug("Closing write side of %r", self)
            self._state.writable = False
        else:
            self.close()

    def close(self) -> None:
        """Close the resource. Closing an already closed stream does nothing."""
        if self._state.closed:
            return
        try:
            self.resource.close()
        finally:
            logger.debug("Closed %r", self)
            self._buffer.clear()
            self._state.handle = None
            self._state.readable = False
            self._state.writable = False
            self._state.closed = True

    def __enter__(self) -> ChunkStream:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Compatibility flags and unsupported operations
    # ------------------------------------------------------------------
    def advise(self, advice: Union[ReadAdvice, str], offset: int = 0, length: int = 0) -> None:
        """Accept an access pattern hint. The hint is validated and then ignored."""
        ReadAdvice(advice)

    def binmode(self) -> ChunkStream:
        self._state.binmode = True
        return self

    def is_binmode(self) -> bool:
        return self._state.binmode

    def isatty(self) -> bool:
        return self._state.tty

    @property
    def sync(self) -> bool:
        return self._state.sync

    @sync.setter
    def sync(self, value: bool) -> None:
        self._state.sync = bool(value)

    @property
    def autoclose(self) -> bool:
        return self._state.autoclose

    @autoclose.setter
    def autoclose(self, value: bool) -> None:
        self._state.autoclose = bool(value)

    @property
    def close_on_exec(self) -> bool:
        return self._state.close_on_exec

    @close_on_exec.setter
    def close_on_exec(self, value: bool) -> None:
        self._state.close_on_exec = bool(value)

    def fileno(self) -> int:
        if isinstance(self._state.handle, int):
            return self._state.handle
        raise OperationNotSupportedError(f"{type(self).__name__} has no file descriptor")

    def _not_implemented(self, name: str) -> OperationNotSupportedError:
        return OperationNotSupportedError(f"{type(self).__name__}.{name} is not implemented")

    def stat(self) -> Any:
        raise self._not_implemented("stat")

    def ioctl(self, command: int, argument: Any = None) -> Any:
        raise self._not_implemented("ioctl")

    def fcntl(self, command: int, argument: Any = None) -> Any:
        raise self._not_implemented("fcntl")

    def reopen(self, *args: Any, **kwargs: Any) -> Any:
        raise self._not_implemented("reopen")

    def __repr__(self) -> str:
        if self._state.handle is not None:
            return f"<{type(self).__name__}: {self._state.handle!r}>"
        return f"<{type(self).__name__}>"
