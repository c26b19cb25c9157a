"""Defines custom exceptions used throughout the chunkio library."""


class ChunkIOError(Exception):
    """Base exception for all errors raised by chunkio streams."""

    pass


class StreamClosedError(ChunkIOError):
    """Raised when an operation needs a side of the stream that has been closed."""

    pass


class ClosedForReadingError(StreamClosedError):
    """Raised when reading from a stream whose read side is disabled or closed."""

    pass


class ClosedForWritingError(StreamClosedError):
    """Raised when writing to a stream whose write side is disabled or closed."""

    pass


class UnexpectedEOFError(ChunkIOError, EOFError):
    """
    Raised when a read that must produce data finds the end of the stream.

    This covers delimited reads that cannot return even a separator, and the
    single-unit "must succeed" reads such as ``readbyte()`` and ``readchar()``.
    """

    pass


class OperationNotSupportedError(ChunkIOError, NotImplementedError):
    """
    Raised for operations the stream exposes but does not implement, such as
    ``stat()``, ``ioctl()`` or ``reopen()``, or for primitive operations the
    underlying resource does not provide.
    """

    pass


class RetryTimeoutError(ChunkIOError, TimeoutError):
    """Raised when a resource keeps reporting "no data yet" past the retry timeout."""

    pass


class ReadCancelledError(ChunkIOError):
    """Raised when the cancellation token of a stream is set while waiting for data."""

    pass
