"""
Cancellation tokens for WebApiClient calls.

Every call runs against a CancellationToken. A token is cancelled either
explicitly with ``cancel()`` or implicitly once its deadline passes; both end
the call with a RequestTimeoutError.
"""

import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from .exceptions import RequestTimeoutError

T = TypeVar("T")


class CancellationToken:
    """A cancellation signal with an optional deadline.

    ``cancel()`` must be called from the thread running the event loop.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize a token.

        Args:
            timeout: Seconds until the token cancels itself, or None for no deadline
        """
        self._event = asyncio.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def with_timeout(cls, millis: int) -> "CancellationToken":
        """Create a token that cancels itself after the given number of milliseconds."""
        return cls(timeout=millis / 1000)

    @classmethod
    def none(cls) -> "CancellationToken":
        """Create a token that is only cancelled explicitly."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    async def wait(self) -> None:
        """Wait until the token is cancelled explicitly."""
        await self._event.wait()


async def run_cancellable(awaitable: Awaitable[T], token: CancellationToken) -> T:
    """
    Await ``awaitable`` unless the token is cancelled first.

    Raises:
        RequestTimeoutError: If the token is cancelled or its deadline passes
            before the awaitable completes
    """
    if token.cancelled:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise RequestTimeoutError()

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())

    try:
        done, _ = await asyncio.wait(
            {task, waiter}, timeout=token.remaining(), return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    # Let the transport unwind before reporting the timeout
    await asyncio.gather(task, return_exceptions=True)
    raise RequestTimeoutError()
