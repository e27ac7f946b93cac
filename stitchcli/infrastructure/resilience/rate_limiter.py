"""Implementation of a rate limiter.

Controls the frequency of outgoing requests to stay under the Stitch API
rate limit. Operations are admitted in FIFO order; each admission holds one
of `concurrency` slots for `spacing_seconds`, counted from the moment of
admission rather than completion, so the admission rate is capped
independently of request latency.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Set, Tuple, TypeVar

from stitchcli.domain.events.api_events import EventListener, RequestAdmitted, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 1
DEFAULT_SPACING_SECONDS = 4.0

T = TypeVar("T")
Operation = Callable[[], Awaitable[Any]]

class RateLimiter:
    """FIFO admission queue with bounded, time-spaced slots."""

    def __init__(
        self,
        concurrency: int = DEFAULT_CONCURRENCY,
        spacing_seconds: float = DEFAULT_SPACING_SECONDS,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the rate limiter.

        Args:
            concurrency: Maximum number of admissions held at the same time.
            spacing_seconds: How long each admission holds its slot.
            event_listener: Optional callable receiving RequestAdmitted events.
        """
        if concurrency <= 0 or spacing_seconds <= 0:
            raise ValueError("Concurrency and spacing must be positive.")

        self.concurrency = concurrency
        self.spacing_seconds = spacing_seconds
        self._event_listener = event_listener
        self._queue: Deque[Tuple[Operation, asyncio.Future]] = deque()
        self._working = 0
        # Strong references so running operations are not garbage collected
        self._tasks: Set[asyncio.Task] = set()
        logger.info(f"RateLimiter initialized: {concurrency} admission(s) / {spacing_seconds} seconds")

    @property
    def pending(self) -> int:
        """Number of submitted operations still waiting for admission."""
        return len(self._queue)

    @property
    def in_flight(self) -> int:
        """Number of slots currently held."""
        return self._working

    def submit(self, operation: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Queues an operation and returns a future for its result.

        Must be called from inside a running event loop. Cancelling the
        returned future before admission removes the operation from the
        queue; once admitted the operation runs to completion.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._queue.append((operation, future))
        logger.debug(f"Operation queued. Pending={len(self._queue)}, in flight={self._working}")
        if self._working < self.concurrency:
            self._work()
        return future

    def _work(self) -> None:
        """Admits the next queued operation if a slot is free."""
        while self._queue and self._working < self.concurrency:
            operation, future = self._queue.popleft()
            if future.done():
                # Cancelled by the caller while waiting
                logger.debug("Skipping cancelled operation.")
                continue

            self._working += 1
            loop = asyncio.get_running_loop()
            loop.call_later(self.spacing_seconds, self._release)
            dispatch_event(
                RequestAdmitted(queue_depth=len(self._queue), in_flight=self._working),
                self._event_listener,
            )
            logger.debug(f"Operation admitted. Pending={len(self._queue)}, in flight={self._working}")

            task = asyncio.ensure_future(operation())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            task.add_done_callback(lambda t, f=future: self._settle(t, f))
            return

    def _release(self) -> None:
        """Frees one slot after the spacing window and admits the next operation."""
        self._working -= 1
        self._work()

    @staticmethod
    def _settle(task: asyncio.Task, future: asyncio.Future) -> None:
        """Copies the outcome of an admitted operation to the caller's future."""
        if future.done():
            # Caller stopped waiting; consume the outcome so it is not reported as lost
            if not task.cancelled():
                task.exception()
            return
        if task.cancelled():
            future.cancel()
        elif task.exception() is not None:
            future.set_exception(task.exception())
        else:
            future.set_result(task.result())
