from chunkio.config import (
    ChunkIOConfig,
    RetryPolicy,
    default_config,
    get_default_config,
    set_default_config,
    set_default_config_fields,
)
from chunkio.exceptions import (
    ChunkIOError,
    ClosedForReadingError,
    ClosedForWritingError,
    OperationNotSupportedError,
    ReadCancelledError,
    RetryTimeoutError,
    StreamClosedError,
    UnexpectedEOFError,
)
from chunkio.io_wrappers import ChunkStreamRawIO, ensure_bufferedio, open_text
from chunkio.resources import (
    BytesResource,
    ChunkListResource,
    FileObjectResource,
    ResourceBase,
)
from chunkio.stream import ChunkStream
from chunkio.types import PrimitiveResource, ReadAdvice, Whence

__all__ = [
    # Core
    "ChunkStream",
    "PrimitiveResource",
    # Resources
    "ResourceBase",
    "BytesResource",
    "ChunkListResource",
    "FileObjectResource",
    # Standard library interop
    "ChunkStreamRawIO",
    "ensure_bufferedio",
    "open_text",
    # Enums
    "Whence",
    "ReadAdvice",
    # Config
    "ChunkIOConfig",
    "RetryPolicy",
    "default_config",
    "get_default_config",
    "set_default_config",
    "set_default_config_fields",
    # Exceptions
    "ChunkIOError",
    "StreamClosedError",
    "ClosedForReadingError",
    "ClosedForWritingError",
    "UnexpectedEOFError",
    "OperationNotSupportedError",
    "RetryTimeoutError",
    "ReadCancelledError",
]
