"""The single-segment push-back buffer used by :class:`chunkio.ChunkStream`."""

from __future__ import annotations

from typing import Optional


class PushbackBuffer:
    """
    Holds bytes that have been un-read, logically placed before the next chunk
    the resource would yield.

    The buffer only stores bytes; the owning stream is responsible for moving
    its position when data is prepended or taken.
    """

    def __init__(self) -> None:
        self._data: Optional[bytearray] = None

    def prepend(self, data: bytes) -> None:
        """Insert ``data`` in front of anything already buffered."""
        if not data:
            return
        if self._data is None:
            self._data = bytearray(data)
        else:
            self._data[0:0] = data

    def take(self, size: Optional[int] = None) -> bytes:
        """Remove and return up to ``size`` bytes from the front (all if None)."""
        if self._data is None:
            return b""

        if size is None or size >= len(self._data):
            data = bytes(self._data)
            self._data = None
            return data

        data = bytes(self._data[:size])
        # Deleting from the front of a bytearray is amortized O(1) in CPython.
        del self._data[:size]
        return data

    def clear(self) -> None:
        self._data = None

    def is_empty(self) -> bool:
        return self._data is None

    def __len__(self) -> int:
        return 0 if self._data is None else len(self._data)

    def __repr__(self) -> str:
        return f"PushbackBuffer({bytes(self._data) if self._data is not None else None!r})"
