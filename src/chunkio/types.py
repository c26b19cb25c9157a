"""Protocol and enum definitions shared by chunkio streams and resources."""

from __future__ import annotations

import os
import sys
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from enum import StrEnum
elif sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from backports.strenum import StrEnum


class Whence(IntEnum):
    """Reference points for :meth:`ChunkStream.seek`.

    ``DATA`` and ``HOLE`` are only meaningful for resources that support sparse
    files; they mirror :data:`os.SEEK_DATA` and :data:`os.SEEK_HOLE` where the
    platform defines them.
    """

    SET = os.SEEK_SET
    CUR = os.SEEK_CUR
    END = os.SEEK_END
    DATA = getattr(os, "SEEK_DATA", 3)
    HOLE = getattr(os, "SEEK_HOLE", 4)


class ReadAdvice(StrEnum):
    """Access pattern hints accepted (and ignored) by :meth:`ChunkStream.advise`."""

    NORMAL = "normal"
    SEQUENTIAL = "sequential"
    RANDOM = "random"
    WILLNEED = "willneed"
    DONTNEED = "dontneed"
    NOREUSE = "noreuse"


Chunk = Union[bytes, bytearray, str]
"""A single unit of data returned by :meth:`PrimitiveResource.read`."""


@runtime_checkable
class PrimitiveResource(Protocol):
    """The minimal contract a resource must satisfy to back a ``ChunkStream``.

    ``read()`` returns the next available chunk, ``None`` when no data is
    available yet, and either an empty chunk or an :class:`EOFError` once the
    stream has ended.
    """

    def open(self) -> Any: ...

    def read(self) -> Optional[Chunk]: ...

    def write(self, data: bytes, /) -> int: ...

    def seek(self, offset: int, whence: int, /) -> Optional[int]: ...

    def close(self) -> None: ...
