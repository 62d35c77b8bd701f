"""Cancellation tokens for superseded or disposed async operations."""

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class OperationCancelled(Exception):
    """Raised inside a task whose token was cancelled. Not an error for telemetry."""

    def __init__(self, reason: str | None = None):
        self.reason = reason or "cancelled"
        super().__init__(self.reason)


class CancellationToken:
    """
    Handle passed into an async task so its result can be discarded.

    A token is cancelled at most once; the first reason wins.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "superseded") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise OperationCancelled(self.reason)

    async def sleep(self, seconds: float) -> None:
        """Sleep for `seconds` unless cancelled first."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise OperationCancelled(self.reason)

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, abandoning it as soon as the token is cancelled."""
        self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done and not self.is_cancelled:
            return task.result()
        task.cancel()
        raise OperationCancelled(self.reason)
