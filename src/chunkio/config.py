from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class RetryPolicy:
    """How long to wait for a resource that reports "no data yet"."""

    interval: float = 1.0
    "Seconds to sleep between two polls of the resource."

    timeout: Optional[float] = None
    "Total seconds to keep polling before raising RetryTimeoutError. None waits forever."

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError(f"retry interval must be non-negative, got {self.interval}")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"retry timeout must be non-negative, got {self.timeout}")


@dataclass
class ChunkIOConfig:
    """Configuration for :class:`chunkio.ChunkStream`.

    A stream takes a snapshot of the configuration when it is constructed;
    changing the default afterwards does not affect streams that are already
    open.
    """

    encoding: str = "utf-8"
    "External encoding. Text chunks are encoded into it, and characters and lines are decoded from it."

    errors: str = "strict"
    "Error handler used when encoding or decoding text, as accepted by codecs (strict, replace, ignore...)."

    source_encoding: Optional[str] = None
    "Encoding of the bytes produced by the resource. If set and different from `encoding`, chunks are transcoded; if None, bytes are passed through unchanged."

    line_separator: str = "\n"
    "Default separator for line reads and for puts()."

    chunk_size: int = 8192
    "Preferred chunk size for resources that read from a file object or a memory buffer."

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    "Polling policy used while the resource has no data available yet."


_default_config_var: contextvars.ContextVar[ChunkIOConfig] = contextvars.ContextVar(
    "chunkio_default_config", default=ChunkIOConfig()
)


def get_default_config() -> ChunkIOConfig:
    """Return the current default configuration."""
    return _default_config_var.get()


def set_default_config(config: ChunkIOConfig) -> None:
    """Set the default configuration for new streams."""
    _default_config_var.set(config)


def set_default_config_fields(**kwargs: Any) -> None:
    """Replace some fields of the default configuration for new streams."""
    config = get_default_config()
    config = replace(config, **kwargs)
    set_default_config(config)


def resolve_config(config: ChunkIOConfig | None = None, **kwargs: Any) -> ChunkIOConfig:
    """Return ``config`` (or the default one) with ``kwargs`` applied on top."""
    if config is None:
        config = get_default_config()
    if kwargs:
        config = replace(config, **kwargs)
    return config


@contextmanager
def default_config(config: ChunkIOConfig | None = None, **kwargs: Any):
    """Temporarily use ``config`` as the default configuration."""
    token = _default_config_var.set(resolve_config(config, **kwargs))
    try:
        yield
    finally:
        _default_config_var.reset(token)
