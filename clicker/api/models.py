from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, computed_field


class MonsterPhase(StrEnum):
    alive = "alive"
    defeated = "defeated"


class MonsterState(BaseModel):
    name: str = "Goblin"
    level: int = Field(..., ge=1)
    max_hp: int = Field(..., ge=0)

    # Clamped to zero on defeat; use `display_hp` for anything user-facing.
    current_hp: int

    phase: MonsterPhase = MonsterPhase.alive

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_hp(self) -> int:
        return max(self.current_hp, 0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hp_percentage(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.display_hp / self.max_hp * 100


class SessionState(BaseModel):
    session_id: UUID
    player_id: str

    # True when the identity provider was unavailable and a random id was used.
    anonymous: bool = False

    level: int = Field(1, ge=1)
    gold: int = Field(0, ge=0)
    click_damage: int = Field(1, ge=1)
    upgrade_cost: int = Field(10, ge=1)

    monster: MonsterState

    # Last notification shown to the player.
    message: str = ""

    total_clicks: int = 0
    monsters_defeated: int = 0
    upgrades_purchased: int = 0

    created_at: datetime
    last_updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_afford_upgrade(self) -> bool:
        return self.gold >= self.upgrade_cost


class SessionCreateRequest(BaseModel):
    player_id: str | None = Field(None, min_length=1, max_length=128)


class SessionListResponse(BaseModel):
    sessions: list[SessionState]


class ActionResponse(BaseModel):
    state: SessionState
    events: list[dict[str, Any]] = Field(default_factory=list)
