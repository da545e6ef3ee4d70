"""
In-memory multicast channel for book change events.

Each subscriber gets its own bounded queue plus a heartbeat ticker that feeds
the same queue, so heartbeats and real events are observed in arrival order.
Publishing never blocks: when a subscriber's queue is full the event is
dropped for that subscriber only.

    broadcaster = EventBroadcaster(buffer_size=256, heartbeat_interval=15)

    async with broadcaster.subscribe() as events:
        async for event in events:
            ...

    broadcaster.publish(book)   # from any thread
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional, Set

from src.database import schemas

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """One consumer's view of the channel. Iterate it; close it when done."""

    def __init__(
        self,
        broadcaster: "EventBroadcaster",
        buffer_size: int,
        heartbeat_interval: float,
        heartbeat_factory: Callable[[], Any],
    ):
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)
        self._loop = asyncio.get_running_loop()
        self._heartbeat_interval = heartbeat_interval
        self._heartbeat_factory = heartbeat_factory
        self._closed = False
        self.dropped = 0
        self._ticker = self._loop.create_task(self._tick())

    @property
    def closed(self) -> bool:
        return self._closed

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            self.deliver(self._heartbeat_factory())

    def _offer(self, event: Any) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug("Subscriber buffer full, dropping event (%d dropped so far)", self.dropped)

    def deliver(self, event: Any) -> None:
        """
        Queue `event` without blocking. Callable from any thread.

        Every delivery, including ones made on the subscriber's own loop, is
        handed over with call_soon_threadsafe, so events land in the order
        deliver() was called regardless of the calling thread.
        """
        try:
            self._loop.call_soon_threadsafe(self._offer, event)
        except RuntimeError:
            # Subscriber's loop is gone; nothing left to deliver to.
            logger.debug("Subscriber loop closed, dropping event")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._ticker.cancel()
        self._broadcaster._remove(self)
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        # Events queued before close() are still handed out.
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class EventBroadcaster:
    def __init__(
        self,
        buffer_size: int = 256,
        heartbeat_interval: float = 15.0,
        heartbeat_factory: Optional[Callable[[], Any]] = None,
    ):
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive")
        self.buffer_size = buffer_size
        self.heartbeat_interval = heartbeat_interval
        self._heartbeat_factory = heartbeat_factory or schemas.heartbeat
        self._subscribers: Set[Subscription] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Start a subscription. Must be called from a running event loop."""
        sub = Subscription(self, self.buffer_size, self.heartbeat_interval, self._heartbeat_factory)
        with self._lock:
            self._subscribers.add(sub)
        logger.info("Stream subscriber attached (%d active)", self.subscriber_count)
        return sub

    def publish(self, event: Any) -> None:
        """Fan `event` out to every live subscriber. Never blocks, never raises."""
        try:
            with self._lock:
                targets = list(self._subscribers)
            for sub in targets:
                sub.deliver(event)
        except Exception:
            logger.exception("Broadcast publish failed")

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)
        logger.info("Stream subscriber detached (%d active)", self.subscriber_count)

    def close(self) -> None:
        with self._lock:
            targets = list(self._subscribers)
        for sub in targets:
            sub.close()
