"""
Event bus with a Pub/Sub pattern.

Carries the "cart updated" broadcast and UI toasts between components.

Supports:
- In-memory pub/sub for a single process
- Redis pub/sub when several processes share one cart
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of bus events."""

    CART_UPDATED = "cart_updated"
    TOAST = "toast"


@dataclass
class Event:
    """Event payload."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Create from dictionary."""
        return cls(
            type=EventType(data["type"]),
            data=data.get("data", {}),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


# Type for event handlers
EventHandler = Callable[[Event], Awaitable[None]]


class PubSubBackend(ABC):
    """Abstract base for pub/sub backends."""

    @abstractmethod
    async def publish(self, channel: str, event: Event) -> None:
        """Publish event to channel."""

    @abstractmethod
    async def subscribe(self, channel: str, handler: EventHandler) -> None:
        """Subscribe to channel with handler."""

    @abstractmethod
    async def unsubscribe(self, channel: str, handler: EventHandler) -> None:
        """Unsubscribe handler from channel."""

    @abstractmethod
    async def close(self) -> None:
        """Close backend connections."""


async def _dispatch(channel: str, handlers: set[EventHandler], event: Event) -> None:
    for handler in handlers:
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"Handler error in channel {channel}: {e}")


class InMemoryPubSub(PubSubBackend):
    """In-memory pub/sub for a single process."""

    def __init__(self):
        self._subscribers: dict[str, set[EventHandler]] = {}
        self._lock = asyncio.Lock()

    async def publish(self, channel: str, event: Event) -> None:
        """Publish to in-memory subscribers."""
        handlers = self._subscribers.get(channel, set()).copy()
        await _dispatch(channel, handlers, event)

    async def subscribe(self, channel: str, handler: EventHandler) -> None:
        """Subscribe to channel."""
        async with self._lock:
            if channel not in self._subscribers:
                self._subscribers[channel] = set()
            self._subscribers[channel].add(handler)
            logger.debug(f"Subscribed to {channel}, total: {len(self._subscribers[channel])}")

    async def unsubscribe(self, channel: str, handler: EventHandler) -> None:
        """Unsubscribe from channel."""
        async with self._lock:
            if channel in self._subscribers:
                self._subscribers[channel].discard(handler)
                if not self._subscribers[channel]:
                    del self._subscribers[channel]

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    async def close(self) -> None:
        """Clear all subscribers."""
        self._subscribers.clear()


class RedisPubSub(PubSubBackend):
    """Redis-based pub/sub for multi-process deployments."""

    def __init__(self, redis_url: str):
        self._redis_url = redis_url
        self._redis = None
        self._pubsub = None
        self._subscribers: dict[str, set[EventHandler]] = {}
        self._listener_task: asyncio.Task | None = None
        self._running = False

    async def _ensure_connected(self) -> None:
        """Ensure Redis connection is established."""
        if self._redis is None:
            import redis.asyncio as aioredis

            self._redis = aioredis.from_url(self._redis_url)
            self._pubsub = self._redis.pubsub()
            self._running = True
            self._listener_task = asyncio.create_task(self._listen())

    async def _listen(self) -> None:
        """Listen for Redis pub/sub messages."""
        while self._running and self._pubsub:
            try:
                if not self._subscribers:
                    await asyncio.sleep(0.1)
                    continue
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=1.0
                )
                if message and message["type"] == "message":
                    channel = (
                        message["channel"].decode()
                        if isinstance(message["channel"], bytes)
                        else message["channel"]
                    )
                    event = Event.from_dict(json.loads(message["data"]))
                    handlers = self._subscribers.get(channel, set()).copy()
                    await _dispatch(channel, handlers, event)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Redis listener error: {e}")
                await asyncio.sleep(1)

    async def publish(self, channel: str, event: Event) -> None:
        """Publish to Redis channel."""
        await self._ensure_connected()
        await self._redis.publish(channel, event.to_json())

    async def subscribe(self, channel: str, handler: EventHandler) -> None:
        """Subscribe to Redis channel."""
        await self._ensure_connected()

        if channel not in self._subscribers:
            self._subscribers[channel] = set()
            await self._pubsub.subscribe(channel)

        self._subscribers[channel].add(handler)

    async def unsubscribe(self, channel: str, handler: EventHandler) -> None:
        """Unsubscribe from Redis channel."""
        if channel in self._subscribers:
            self._subscribers[channel].discard(handler)
            if not self._subscribers[channel]:
                del self._subscribers[channel]
                if self._pubsub:
                    await self._pubsub.unsubscribe(channel)

    async def close(self) -> None:
        """Close Redis connections."""
        self._running = False
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
        if self._pubsub:
            await self._pubsub.aclose()
        if self._redis:
            await self._redis.aclose()


class EventBus:
    """
    Broadcast channel shared by the components of one storefront.

    Producers that change the remote cart call ``publish_cart_updated``;
    the cart store subscribes and reloads.
    """

    CART_CHANNEL = "cart_updated"
    TOAST_CHANNEL = "toasts"

    def __init__(self, backend: PubSubBackend | None = None):
        self._backend = backend or InMemoryPubSub()

    @property
    def backend(self) -> PubSubBackend:
        return self._backend

    async def publish_cart_updated(self) -> None:
        """Tell every subscriber the remote cart changed."""
        await self._backend.publish(self.CART_CHANNEL, Event(type=EventType.CART_UPDATED))

    async def subscribe_cart_updated(self, handler: EventHandler) -> None:
        await self._backend.subscribe(self.CART_CHANNEL, handler)

    async def unsubscribe_cart_updated(self, handler: EventHandler) -> None:
        await self._backend.unsubscribe(self.CART_CHANNEL, handler)

    async def publish_toast(self, data: dict[str, Any]) -> None:
        await self._backend.publish(self.TOAST_CHANNEL, Event(type=EventType.TOAST, data=data))

    async def subscribe_toasts(self, handler: EventHandler) -> None:
        await self._backend.subscribe(self.TOAST_CHANNEL, handler)

    async def unsubscribe_toasts(self, handler: EventHandler) -> None:
        await self._backend.unsubscribe(self.TOAST_CHANNEL, handler)

    async def close(self) -> None:
        """Close event bus."""
        await self._backend.close()

