from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import redis

from clicker.core.events import GameEvent


@dataclass(frozen=True, slots=True)
class SessionStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"events:session:{self.session_id}"


def publish_event(*, r: redis.Redis, event: GameEvent) -> str:
    """Append an event to its session's stream."""

    stream_id = r.xadd(SessionStream(session_id=event.session_id).key, event.as_fields())
    return cast(str, stream_id)


def read_events(
    *,
    r: redis.Redis,
    session_id: str,
    count: int = 20,
    start: str = "-",
    end: str = "+",
) -> list[tuple[str, dict[str, str]]]:
    entries = r.xrange(SessionStream(session_id=session_id).key, min=start, max=end, count=count)
    return cast(list[tuple[str, dict[str, str]]], entries)
