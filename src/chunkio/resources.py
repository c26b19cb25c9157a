"""Reference implementations of the primitive resource contract."""

from __future__ import annotations

import io
import logging
import os
from typing import IO, Any, Iterable, Optional

from chunkio.exceptions import OperationNotSupportedError
from chunkio.types import Chunk, Whence

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


def is_seekable(resource: Any) -> bool:
    """Check if a resource (or file object) supports seeking."""
    if not callable(getattr(resource, "seek", None)):
        return False

    try:
        result = resource.seekable()
    except AttributeError as e:
        # Resources are not required to implement seekable(); having seek() is
        # taken as a promise that it works.
        logger.debug("Resource %s does not have a seekable method: %s", resource, e)
        return True

    # The result can be None if the class declared the method without
    # implementing it.
    return True if result is None else bool(result)


class ResourceBase:
    """
    Default implementations of the primitive operations.

    Subclasses override the operations they support: by default the resource
    opens with no handle, is immediately at its end, accepts no written data
    and cannot seek.
    """

    def open(self) -> Any:
        return None

    def read(self) -> Optional[Chunk]:
        return b""

    def write(self, data: bytes, /) -> int:
        return 0

    def seek(self, offset: int, whence: int, /) -> Optional[int]:
        raise OperationNotSupportedError(f"{type(self).__name__}.seek is not implemented")

    def seekable(self) -> bool:
        return type(self).seek is not ResourceBase.seek

    def close(self) -> None:
        pass


class BytesResource(ResourceBase):
    """An in-memory, seekable and writable resource that yields fixed-size chunks."""

    def __init__(self, data: bytes = b"", chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._data = bytearray(data)
        self._pos = 0
        self.chunk_size = chunk_size
        self.closed = False

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def read(self) -> Optional[Chunk]:
        chunk = bytes(self._data[self._pos : self._pos + self.chunk_size])
        self._pos += len(chunk)
        return chunk

    def write(self, data: bytes, /) -> int:
        end = self._pos + len(data)
        if self._pos > len(self._data):
            # Writing past the end fills the gap with zeroes, like a sparse file.
            self._data.extend(b"\0" * (self._pos - len(self._data)))
        self._data[self._pos : end] = data
        self._pos = end
        return len(data)

    def seek(self, offset: int, whence: int, /) -> int:
        if whence == Whence.SET:
            new_pos = offset
        elif whence == Whence.CUR:
            new_pos = self._pos + offset
        elif whence == Whence.END:
            new_pos = len(self._data) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")

        if new_pos < 0:
            raise ValueError("negative seek position")
        self._pos = new_pos
        return self._pos

    def tell(self) -> int:
        return self._pos

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        return f"BytesResource(size={len(self._data)}, chunk_size={self.chunk_size})"


class ChunkListResource(ResourceBase):
    """
    Replays a fixed sequence of chunks, one per ``read()`` call.

    A ``None`` item is returned as-is ("no data yet"), and an empty item is a
    short read. Once the sequence is exhausted, ``read()`` raises
    :class:`EOFError`. Written data is collected in :attr:`written`.
    """

    def __init__(self, chunks: Iterable[Optional[Chunk]]):
        self._chunks = iter(chunks)
        self.reads = 0
        self.written: list[bytes] = []
        self.closed = False

    def read(self) -> Optional[Chunk]:
        self.reads += 1
        try:
            return next(self._chunks)
        except StopIteration:
            raise EOFError("no more chunks") from None

    def write(self, data: bytes, /) -> int:
        self.written.append(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


class FileObjectResource(ResourceBase):
    """
    Adapts a binary file object (a regular file, a pipe, a socket file...) to
    the primitive resource contract.
    """

    def __init__(
        self,
        fileobj: IO[bytes],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        *,
        close_fileobj: bool = True,
    ):
        """
        Args:
            fileobj: The binary file object to read from and write to.
            chunk_size: Maximum size of the chunks read from the file object.
            close_fileobj: Whether closing the resource also closes the file
                object.
        """
        self._fileobj = fileobj
        self.chunk_size = chunk_size
        self.close_fileobj = close_fileobj
        # read1() returns whatever is available without blocking for more.
        self._read_fn = getattr(fileobj, "read1", None) or fileobj.read

    @classmethod
    def from_path(
        cls, path: str | os.PathLike[str], mode: str = "rb", chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> FileObjectResource:
        if "b" not in mode:
            mode += "b"
        return cls(open(path, mode), chunk_size)

    def open(self) -> Any:
        try:
            return self._fileobj.fileno()
        except (AttributeError, OSError, io.UnsupportedOperation):
            return None

    def read(self) -> Optional[Chunk]:
        # Non-blocking file objects return None when no data is available.
        return self._read_fn(self.chunk_size)

    def write(self, data: bytes, /) -> int:
        written = self._fileobj.write(data)
        return len(data) if written is None else written

    def seek(self, offset: int, whence: int, /) -> int:
        if not is_seekable(self._fileobj):
            raise OperationNotSupportedError(f"{self._fileobj!r} is not seekable")
        return self._fileobj.seek(offset, whence)

    def seekable(self) -> bool:
        return is_seekable(self._fileobj)

    def tell(self) -> int:
        return self._fileobj.tell()

    def close(self) -> None:
        if self.close_fileobj:
            self._fileobj.close()
        else:
            flush = getattr(self._fileobj, "flush", None)
            if callable(flush):
                flush()

    def __repr__(self) -> str:
        return f"FileObjectResource({self._fileobj!r})"
