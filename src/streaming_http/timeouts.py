"""
Deadline and cancellation helpers shared by the framer and the reader.

A long-poll wait is a series of bounded attempts checked against one
monotonic deadline, with an ``asyncio.Event`` as the cooperative
cancellation signal.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import OperationCancelled

T = TypeVar("T")


class Deadline:
    """Monotonic deadline started at construction time."""

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._timeout = max(timeout, 0.0)
        self._start = clock()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def elapsed(self) -> float:
        """Seconds since the deadline was started."""
        return self._clock() - self._start

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0

    @property
    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(self._timeout - self.elapsed, 0.0)

    @property
    def expired(self) -> bool:
        return self.elapsed >= self._timeout


def is_cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


async def wait_with_cancel(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    cancel_event: Optional[asyncio.Event] = None,
) -> T:
    """
    Await ``awaitable`` bounded by ``timeout`` and ``cancel_event``.
    
    Args:
        awaitable: The operation to run.
        timeout: Seconds to wait, or None to wait without a bound.
        cancel_event: Optional event; setting it aborts the wait.
    
    Returns:
        The result of ``awaitable``.
    
    Raises:
        OperationCancelled: If ``cancel_event`` was set first.
        asyncio.TimeoutError: If ``timeout`` passed first.
    """
    if cancel_event is None:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    
    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise OperationCancelled()
    
    task = asyncio.ensure_future(awaitable)
    cancel_waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {task, cancel_waiter},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        cancel_waiter.cancel()
        if not task.done():
            task.cancel()
    
    if task in done:
        return task.result()
    
    try:
        await task
    except asyncio.CancelledError:
        pass
    
    if cancel_event.is_set():
        raise OperationCancelled()
    raise asyncio.TimeoutError()
