"""In-process hub that fans broadcast messages out to WebSocket subscribers.

Each subscriber owns a bounded queue drained by its WebSocket endpoint.
Publishing never blocks: when a subscriber's queue is full the message is
dropped for that subscriber only. ``publish`` may be called from worker
threads (sync route handlers), so messages are handed to the subscriber's
event loop with ``call_soon_threadsafe``.
"""

import asyncio
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from uuid import uuid4

import structlog

from ordering.broadcast.port import Broadcaster

logger = structlog.get_logger(__name__)

DEFAULT_QUEUE_SIZE = 100


@dataclass(eq=False)
class Subscription:
    channel: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue
    id: str = field(default_factory=lambda: uuid4().hex)
    dropped: int = 0

    def offer(self, message: dict) -> None:
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "broadcast_dropped",
                channel=self.channel,
                subscriber=self.id,
                event_type=message.get("event"),
                dropped=self.dropped,
            )

    async def next_message(self) -> dict:
        return await self.queue.get()


class WebSocketHub(Broadcaster):
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, channel: str) -> Subscription:
        """Register a subscriber. Must be called from the event loop that will drain it."""
        subscription = Subscription(
            channel=channel,
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self._queue_size),
        )
        with self._lock:
            self._subscribers[channel].add(subscription)
        logger.debug("subscriber_added", channel=channel, subscriber=subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.channel)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscribers[subscription.channel]
        logger.debug("subscriber_removed", channel=subscription.channel, subscriber=subscription.id)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, ()))

    def publish(self, channel, message):
        with self._lock:
            subscribers = list(self._subscribers.get(channel, ()))

        for subscription in subscribers:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, message)
            except RuntimeError:
                # Event loop already closed: the connection is gone
                logger.info("stale_subscriber_removed", channel=channel, subscriber=subscription.id)
                self.unsubscribe(subscription)
