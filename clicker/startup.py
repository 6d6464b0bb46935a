from __future__ import annotations

from clicker.config import GameSettings, settings_from_env
from clicker.core.timers import Scheduler
from clicker.progression import ProgressionEngine
from clicker.relay import EventRelay
from clicker.session_store import SessionStore, get_store, init_store


def build_engine(*, settings: GameSettings | None = None, scheduler: Scheduler | None = None) -> ProgressionEngine:
    engine = ProgressionEngine(settings=settings or settings_from_env(), scheduler=scheduler)
    engine.subscribe(EventRelay())
    return engine


def init_store_for_app() -> SessionStore:
    # Keep a store installed before startup (tests use one with a manual scheduler).
    try:
        return get_store()
    except RuntimeError:
        return init_store(engine=build_engine())
