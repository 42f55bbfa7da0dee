"""Push-based, cancellable subscriptions consumed with ``async for``."""

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """A live stream of snapshots.

    Producers call :meth:`push`; consumers iterate. :meth:`cancel` runs the
    detach callback before returning, and nothing is yielded after it.
    """

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def push(self, value: T) -> None:
        if self._cancelled:
            return
        self._queue.put_nowait(value)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
        self._queue.put_nowait(_CLOSED)

    async def next(self, timeout: float = None) -> T:
        """Wait for the next snapshot; raises ``StopAsyncIteration`` once cancelled."""
        if self._cancelled:
            raise StopAsyncIteration
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _CLOSED or self._cancelled:
            raise StopAsyncIteration
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> T:
        return await self.next()

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class Broadcaster(Generic[T]):
    """Fan a stream of snapshots out to any number of subscriptions."""

    def __init__(self):
        self._subscriptions = set()

    def subscribe(self, initial: Optional[T] = None) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(
            on_cancel=lambda: self._subscriptions.discard(subscription)
        )
        self._subscriptions.add(subscription)
        if initial is not None:
            subscription.push(initial)
        return subscription

    def publish(self, value: T) -> None:
        for subscription in list(self._subscriptions):
            subscription.push(value)

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.cancel()

    def __len__(self) -> int:
        return len(self._subscriptions)
