"""Polling of a primitive resource until it produces a chunk or ends."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from chunkio.config import RetryPolicy
from chunkio.exceptions import ReadCancelledError, RetryTimeoutError
from chunkio.types import Chunk

logger = logging.getLogger(__name__)


class ChunkRetriever:
    """
    Calls a resource's ``read()`` until it returns data.

    ``None`` from the resource means "no data yet" and is retried after the
    policy interval. An :class:`EOFError` from the resource ends the stream and
    is reported as ``None`` to the caller; an empty chunk is returned as-is and
    interpreted by the caller as a short read.
    """

    def __init__(
        self,
        read_fn: Callable[[], Optional[Chunk]],
        policy: RetryPolicy,
        cancel: Optional[threading.Event] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._read = read_fn
        self.policy = policy
        self.cancel = cancel
        self._sleep = sleep
        self._clock = clock

    def _check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise ReadCancelledError("read cancelled while waiting for data")

    def next_chunk(self) -> Optional[Chunk]:
        """Return the next chunk, or None if the resource signalled the end."""
        deadline = None
        if self.policy.timeout is not None:
            deadline = self._clock() + self.policy.timeout

        attempts = 0
        while True:
            self._check_cancelled()
            try:
                chunk = self._read()
            except EOFError:
                logger.debug("Resource signalled end of stream")
                return None

            if chunk is not None:
                if attempts:
                    logger.debug("Got data after %d retries", attempts)
                return chunk

            attempts += 1
            if deadline is not None and self._clock() >= deadline:
                raise RetryTimeoutError(
                    f"no data available after {self.policy.timeout}s ({attempts} polls)"
                )

            logger.debug(
                "No data available yet, retrying in %.3fs (attempt %d)",
                self.policy.interval,
                attempts,
            )
            if self.cancel is not None:
                # Wake up early if the cancellation token is set while sleeping.
                self.cancel.wait(self.policy.interval)
            else:
                self._sleep(self.policy.interval)
