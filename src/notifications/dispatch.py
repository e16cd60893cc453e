"""Consumer-side hand-off for decoded notifications.

The receiver awaits each dispatcher call before reading the next datagram.
Consumers that need to overlap work should use `QueueDispatcher`, which
returns as soon as the notification is queued.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable
from typing import Protocol, runtime_checkable

from notifications.models import EventName, Notification

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Dispatcher(Protocol):
    """Delivers one notification; may be sync or async."""

    def __call__(self, notification: Notification) -> Awaitable[None] | None:  # pragma: no cover - protocol stub
        ...


async def deliver(dispatcher: Dispatcher, notification: Notification) -> None:
    result = dispatcher(notification)
    if inspect.isawaitable(result):
        await result


class QueueDispatcher:
    """Bounded queue between the receiver and an independent consumer task.

    `__call__` suspends only while the queue is full, so ordering is kept and
    memory stays bounded by `maxsize`.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self._queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=maxsize)

    async def __call__(self, notification: Notification) -> None:
        await self._queue.put(notification)

    async def get(self) -> Notification:
        notification = await self._queue.get()
        self._queue.task_done()
        return notification

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    async def __aiter__(self) -> AsyncIterator[Notification]:
        while True:
            yield await self.get()


class EventRouter:
    """Routes notifications to handlers registered per event name."""

    def __init__(self, fallback: Dispatcher | None = None) -> None:
        self._handlers: dict[EventName, list[Dispatcher]] = {}
        self._fallback = fallback

    def on(self, event: EventName | str, handler: Dispatcher) -> Dispatcher:
        self._handlers.setdefault(EventName(event), []).append(handler)
        return handler

    def handlers_for(self, event: EventName) -> list[Dispatcher]:
        return list(self._handlers.get(event, ()))

    async def __call__(self, notification: Notification) -> None:
        handlers = self._handlers.get(notification.event)
        if not handlers:
            if self._fallback is not None:
                await deliver(self._fallback, notification)
            else:
                LOGGER.debug("No handler for %s", notification.event.value)
            return

        for handler in handlers:
            await deliver(handler, notification)
