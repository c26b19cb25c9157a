from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class StreamState:
    """Position and lifecycle bookkeeping of a :class:`chunkio.ChunkStream`."""

    encoding: str
    "External encoding of the stream."

    pos: int = 0
    "Bytes logically consumed from the start of the stream, independent of buffering."

    eof: bool = False
    "Whether the resource has signalled the end of the stream."

    lineno: int = 0
    "Number of delimited reads performed since opening (or the last rewind)."

    closed: bool = True
    readable: bool = True
    writable: bool = True

    handle: Any = None
    "Opaque token returned by the resource's open()."

    pid: Optional[int] = None

    # Kept for compatibility with file-like callers; they have no effect on buffering.
    sync: bool = False
    binmode: bool = False
    tty: bool = False
    autoclose: bool = True
    close_on_exec: bool = True

    def reset(self, handle: Any) -> None:
        """Reset the position counters after the resource has been opened."""
        self.pos = 0
        self.lineno = 0
        self.eof = False
        self.handle = handle
        self.closed = False
