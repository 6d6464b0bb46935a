from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "SESSION_STARTED",
    "SESSION_RESET",
    "MONSTER_SPAWNED",
    "MONSTER_HIT",
    "MONSTER_DEFEATED",
    "UPGRADE_PURCHASED",
    "UPGRADE_REJECTED",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    session_id: str
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, session_id: str, payload: dict[str, Any]) -> "GameEvent":
        return GameEvent(type=type, session_id=session_id, payload=payload, ts=datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type, "session_id": self.session_id, "ts": self.ts.isoformat(), **self.payload}

    def as_fields(self) -> dict[str, str]:
        """Flatten to string fields (Redis Streams only carry strings)."""

        return {str(k): str(v) for k, v in self.as_dict().items()}
