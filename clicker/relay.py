from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import redis

from clicker.core.events import GameEvent
from clicker.infra.redis_client import get_shared_redis
from clicker.streams import publish_event
from clicker.websocket_hub import SessionWebSocketHub, hub

logger = logging.getLogger(__name__)


class EventRelay:
    """Engine listener that fans events out to the presentation layer.

    Every event is appended to the session's Redis Stream. When an event loop is
    running (API server, timer callbacks) it is also pushed to WebSocket subscribers.
    """

    def __init__(
        self,
        *,
        redis_factory: Callable[[], redis.Redis] = get_shared_redis,
        ws_hub: SessionWebSocketHub = hub,
    ) -> None:
        self._redis_factory = redis_factory
        self._hub = ws_hub
        self._tasks: set[asyncio.Task[int]] = set()

    def __call__(self, event: GameEvent) -> None:
        try:
            publish_event(r=self._redis_factory(), event=event)
        except redis.RedisError:
            logger.warning("Could not publish %s for session %s", event.type, event.session_id, exc_info=True)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        task = loop.create_task(self._hub.publish(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
