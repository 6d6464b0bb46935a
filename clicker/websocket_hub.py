from __future__ import annotations

import asyncio
import itertools
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

from clicker.api.models import SessionState
from clicker.core.events import GameEvent

logger = logging.getLogger(__name__)


class SessionWebSocketHub:
    """Pushes engine events to the players watching a session.

    - `connect()` accepts the socket and sends a `session_snapshot` with the full state,
      so a client can render before the first event arrives.
    - `publish(event)` sends a `session_updated` message for each engine event. Messages
      carry a per-session `seq` so clients can spot dropped updates and refetch.
    - sockets that fail a send are dropped.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = defaultdict(set)
        self._seq: dict[str, itertools.count[int]] = defaultdict(lambda: itertools.count(1))
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, websocket: WebSocket, *, snapshot: SessionState | None = None) -> None:
        await websocket.accept()
        if snapshot is not None:
            await websocket.send_json({"type": "session_snapshot", "state": snapshot.model_dump(mode="json")})
        async with self._lock:
            self._watchers[session_id].add(websocket)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            watchers = self._watchers.get(session_id)
            if not watchers:
                return
            watchers.discard(websocket)
            if not watchers:
                self._watchers.pop(session_id, None)
                self._seq.pop(session_id, None)

    def watcher_count(self, session_id: str) -> int:
        return len(self._watchers.get(session_id, ()))

    @staticmethod
    def event_message(event: GameEvent, *, seq: int) -> dict[str, Any]:
        return {**event.as_dict(), "type": "session_updated", "event": event.type, "seq": seq}

    async def publish(self, event: GameEvent) -> int:
        """Send one engine event to everyone watching its session.

        Returns the number of sockets that received it.
        """

        async with self._lock:
            watchers = list(self._watchers.get(event.session_id, ()))
            if not watchers:
                return 0
            seq = next(self._seq[event.session_id])

        message = self.event_message(event, seq=seq)
        dead: list[WebSocket] = []
        for ws in watchers:
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping websocket for session %s after failed send", event.session_id, exc_info=True)
                dead.append(ws)

        for ws in dead:
            await self.disconnect(event.session_id, ws)
        return len(watchers) - len(dead)


hub = SessionWebSocketHub()
