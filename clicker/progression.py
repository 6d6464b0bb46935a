from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from typing import Any
from uuid import uuid4

from clicker.api.models import MonsterState, SessionState
from clicker.config import GameSettings
from clicker.core.events import EventType, GameEvent
from clicker.core.identity import ReadinessProvider, resolve_identity
from clicker.core.timers import AsyncioScheduler, ScheduledCall, Scheduler
from clicker.fsm import MonsterFSM

logger = logging.getLogger(__name__)

EventListener = Callable[[GameEvent], None]


class InsufficientFundsError(ValueError):
    def __init__(self, *, gold: int, cost: int) -> None:
        super().__init__("Not enough gold for this upgrade!")
        self.gold = gold
        self.cost = cost


@dataclass(frozen=True, slots=True)
class ClickResult:
    # False when the click landed on an already defeated monster.
    hit: bool
    damage: int = 0
    defeated: bool = False
    gold_earned: int = 0


@dataclass(frozen=True, slots=True)
class UpgradeResult:
    cost_paid: int
    click_damage: int
    next_cost: int


@dataclass(frozen=True, slots=True)
class RespawnTicket:
    """Snapshot taken when a defeat schedules the next monster."""

    session_id: str
    level: int


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def monster_max_hp(level: int, settings: GameSettings) -> int:
    return level * settings.hp_per_level + settings.base_monster_hp


def gold_for_defeat(level: int, settings: GameSettings) -> int:
    return level * settings.gold_per_level


def next_upgrade_cost(cost: int, factor: float) -> int:
    return math.floor(cost * factor)


class ProgressionEngine:
    """Owns the click/defeat/upgrade rules for every session.

    Sessions are plain models handed in by reference; the engine mutates them and
    reports each change to subscribed listeners as a `GameEvent`.
    """

    def __init__(self, *, settings: GameSettings | None = None, scheduler: Scheduler | None = None) -> None:
        self.settings = settings or GameSettings()
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._listeners: list[EventListener] = []
        self._pending: dict[str, ScheduledCall] = {}

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, session: SessionState, type: EventType, **payload: Any) -> GameEvent:
        event = GameEvent.now(type=type, session_id=str(session.session_id), payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # One broken subscriber must not stop the game for the others.
                logger.exception("Event listener failed for %s", event.type)
        return event

    def _touch(self, session: SessionState) -> None:
        session.last_updated_at = _now()

    def start_session(self, provider: ReadinessProvider | None = None) -> SessionState:
        identity = resolve_identity(provider)
        now = _now()
        settings = self.settings

        session = SessionState(
            session_id=uuid4(),
            player_id=identity.user_id,
            anonymous=identity.anonymous,
            level=1,
            gold=0,
            click_damage=1,
            upgrade_cost=settings.initial_upgrade_cost,
            monster=MonsterState(level=1, max_hp=0, current_hp=0),
            message="Click the goblin to start!",
            created_at=now,
            last_updated_at=now,
        )
        logger.info("Session %s started for player %s", session.session_id, session.player_id)
        self._emit(session, "SESSION_STARTED", player_id=session.player_id, anonymous=session.anonymous)
        self.spawn_monster(session, session.level)
        return session

    def spawn_monster(self, session: SessionState, level: int) -> MonsterState:
        """Put a fresh monster of `level` in front of the player.

        A respawn still waiting on the timer is cancelled.
        """

        self.cancel_pending(session)
        hp = monster_max_hp(level, self.settings)
        monster = MonsterState(level=level, max_hp=hp, current_hp=hp)
        session.monster = monster
        session.message = f"Goblin Lv. {level} appeared!"
        self._touch(session)

        logger.debug("Session %s spawned level %d monster (%d hp)", session.session_id, level, hp)
        self._emit(session, "MONSTER_SPAWNED", level=level, max_hp=hp)
        return monster

    def apply_click(self, session: SessionState) -> ClickResult:
        monster = session.monster
        fsm = MonsterFSM(monster)

        # Defeated and waiting for the respawn: swallow the click.
        if not fsm.accepts_clicks or monster.current_hp <= 0:
            return ClickResult(hit=False)

        damage = session.click_damage
        lethal = monster.current_hp - damage <= 0

        # Book the respawn before mutating anything; a scheduler error leaves the session untouched.
        if lethal:
            ticket = RespawnTicket(session_id=str(session.session_id), level=session.level + 1)
            handle = self.scheduler.call_later(self.settings.respawn_delay_s, partial(self._respawn, session, ticket))
            self._pending[ticket.session_id] = handle

        monster.current_hp -= damage
        session.total_clicks += 1
        self._touch(session)
        self._emit(session, "MONSTER_HIT", damage=damage, current_hp=monster.display_hp, max_hp=monster.max_hp)

        if not lethal:
            return ClickResult(hit=True, damage=damage)

        fsm.defeat()
        fsm.sync_phase_to_model()
        monster.current_hp = 0

        earned = gold_for_defeat(session.level, self.settings)
        session.gold += earned
        session.monsters_defeated += 1
        session.message = f"Goblin defeated! You earned {earned} gold."

        logger.info("Session %s defeated level %d monster, +%d gold", session.session_id, session.level, earned)
        self._emit(session, "MONSTER_DEFEATED", level=session.level, gold_earned=earned, gold=session.gold)
        return ClickResult(hit=True, damage=damage, defeated=True, gold_earned=earned)

    def _respawn(self, session: SessionState, ticket: RespawnTicket) -> None:
        self._pending.pop(ticket.session_id, None)

        fsm = MonsterFSM(session.monster)
        fsm.respawn()
        fsm.sync_phase_to_model()

        session.level = ticket.level
        self.spawn_monster(session, session.level)

    def purchase_upgrade(self, session: SessionState) -> UpgradeResult:
        cost = session.upgrade_cost
        if session.gold < cost:
            self._emit(session, "UPGRADE_REJECTED", gold=session.gold, cost=cost)
            raise InsufficientFundsError(gold=session.gold, cost=cost)

        session.gold -= cost
        session.click_damage += 1
        session.upgrade_cost = next_upgrade_cost(cost, self.settings.upgrade_cost_factor)
        session.upgrades_purchased += 1
        session.message = f"You bought Power Click! Damage per click: {session.click_damage}"
        self._touch(session)

        logger.info("Session %s bought upgrade for %d gold, damage now %d", session.session_id, cost, session.click_damage)
        self._emit(
            session,
            "UPGRADE_PURCHASED",
            cost=cost,
            click_damage=session.click_damage,
            next_cost=session.upgrade_cost,
            gold=session.gold,
        )
        return UpgradeResult(cost_paid=cost, click_damage=session.click_damage, next_cost=session.upgrade_cost)

    def has_pending_respawn(self, session: SessionState) -> bool:
        return str(session.session_id) in self._pending

    def cancel_pending(self, session: SessionState) -> bool:
        handle = self._pending.pop(str(session.session_id), None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def reset_session(self, session: SessionState) -> SessionState:
        """Back to level 1 with starting gold, damage and cost. Cancels a pending respawn."""

        self.cancel_pending(session)
        session.level = 1
        session.gold = 0
        session.click_damage = 1
        session.upgrade_cost = self.settings.initial_upgrade_cost
        session.total_clicks = 0
        session.monsters_defeated = 0
        session.upgrades_purchased = 0

        self._emit(session, "SESSION_RESET")
        self.spawn_monster(session, session.level)
        return session
