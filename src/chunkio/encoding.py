"""Conversion of resource chunks into the external encoding of a stream."""

from __future__ import annotations

import codecs
import logging
from typing import Optional

from chunkio.types import Chunk

logger = logging.getLogger(__name__)


def normalize_encoding_name(encoding: str) -> str:
    """Return the canonical codec name for ``encoding``, raising LookupError if unknown."""
    return codecs.lookup(encoding).name


class EncodingNormalizer:
    """
    Converts every chunk returned by a resource into bytes in the external
    encoding.

    Text chunks are encoded directly. Byte chunks are passed through unchanged
    unless a source encoding different from the external one is configured, in
    which case they are transcoded with an incremental decoder, so that a
    multi-byte sequence split across two chunks is decoded correctly.
    """

    def __init__(
        self,
        encoding: str,
        errors: str = "strict",
        source_encoding: Optional[str] = None,
    ):
        self.encoding = normalize_encoding_name(encoding)
        self.errors = errors
        self.source_encoding: Optional[str] = None
        self._decoder: Optional[codecs.IncrementalDecoder] = None

        if source_encoding is not None:
            source = normalize_encoding_name(source_encoding)
            if source != self.encoding:
                self.source_encoding = source
                self._decoder = codecs.getincrementaldecoder(source)(errors)

    @property
    def transcoding(self) -> bool:
        return self._decoder is not None

    def normalize(self, chunk: Chunk) -> bytes:
        """Return ``chunk`` as bytes in the external encoding.

        When transcoding, the result may be shorter than the input (or empty) if
        the chunk ends in the middle of a multi-byte sequence; the pending bytes
        are emitted with the next chunk.
        """
        if isinstance(chunk, str):
            return chunk.encode(self.encoding, self.errors)

        if self._decoder is None:
            return bytes(chunk)

        text = self._decoder.decode(chunk)
        return text.encode(self.encoding, self.errors)

    def flush(self) -> bytes:
        """Return any pending transcoded data at the end of the stream."""
        if self._decoder is None:
            return b""
        text = self._decoder.decode(b"", final=True)
        if text:
            logger.debug("Flushing %d pending characters at end of stream", len(text))
        return text.encode(self.encoding, self.errors)

    def reset(self) -> None:
        """Drop pending partial sequences, e.g. after a seek."""
        if self._decoder is not None:
            self._decoder.reset()

    def encode(self, text: str) -> bytes:
        return text.encode(self.encoding, self.errors)

    def decoder(self) -> codecs.IncrementalDecoder:
        """Return a fresh incremental decoder for the external encoding."""
        return codecs.getincrementaldecoder(self.encoding)(self.errors)
