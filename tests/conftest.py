import logging
from typing import Callable, Optional

import pytest

from chunkio.config import RetryPolicy
from chunkio.dependency_checker import (
    format_dependency_versions,
    get_dependency_versions,
)
from chunkio.resources import ChunkListResource
from chunkio.stream import ChunkStream
from chunkio.types import Chunk

logger = logging.getLogger(__name__)

# Polling without sleeping keeps retry tests fast.
NO_WAIT = RetryPolicy(interval=0)


@pytest.fixture
def make_stream() -> Callable[..., ChunkStream]:
    """Return a factory building a stream over a scripted list of chunks."""

    def factory(*chunks: Optional[Chunk], **kwargs) -> ChunkStream:
        kwargs.setdefault("retry", NO_WAIT)
        return ChunkStream(ChunkListResource(chunks), **kwargs)

    return factory


@pytest.fixture(autouse=True, scope="session")
def print_dependency_versions_on_failure(request):
    yield
    logger.warning(
        "\n"
        + "=" * 30
        + " Dependency Versions "
        + "=" * 30
        + "\n"
        + format_dependency_versions(get_dependency_versions())
        + "\n"
        + "=" * 80
    )
