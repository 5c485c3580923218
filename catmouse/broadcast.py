"""Publish/subscribe seam for entity-changed events.

The shipped default is `NoopPublisher`: events are logged and dropped, and clients
poll the HTTP endpoints to see changes. The other publishers are opt-in through
`CATMOUSE_BROADCAST`.
"""
from __future__ import annotations

import logging
from typing import Protocol

import redis

from catmouse.events import GameEvent
from catmouse.streams import EVENTS_STREAM_KEY, publish_to_stream
from catmouse.websocket_hub import WebSocketHub

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    name: str

    async def publish(self, event: GameEvent) -> None: ...


class NoopPublisher:
    name = "noop"

    async def publish(self, event: GameEvent) -> None:
        logger.info("Would broadcast: %s", event.type)


class HubPublisher:
    name = "ws"

    def __init__(self, hub: WebSocketHub) -> None:
        self.hub = hub

    async def publish(self, event: GameEvent) -> None:
        logger.info("Broadcasting %s to %s viewers", event.type, self.hub.connection_count)
        await self.hub.broadcast(event.to_message())


class RedisStreamPublisher:
    name = "redis"

    def __init__(self, r: redis.Redis, *, key: str = EVENTS_STREAM_KEY) -> None:
        self.r = r
        self.key = key

    async def publish(self, event: GameEvent) -> None:
        # redis-py is synchronous; XADD is a single round trip.
        stream_id = publish_to_stream(r=self.r, key=self.key, fields=event.to_message())
        logger.info("Published %s to %s as %s", event.type, self.key, stream_id)
