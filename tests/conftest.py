from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest

from clicker.config import GameSettings
from clicker.core.timers import ManualScheduler
from clicker.infra.redis_client import set_shared_redis
from clicker.progression import ProgressionEngine
from clicker.session_store import SessionStore, init_store, reset_store_for_tests
from clicker.startup import build_engine


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def engine(scheduler: ManualScheduler) -> ProgressionEngine:
    """Bare engine: default rules, manual clock, no listeners."""

    return ProgressionEngine(settings=GameSettings(), scheduler=scheduler)


@pytest.fixture()
def fake_redis() -> Generator[fakeredis.FakeRedis, None, None]:
    r = fakeredis.FakeRedis(decode_responses=True)
    set_shared_redis(r)
    yield r
    set_shared_redis(None)


@pytest.fixture()
def app_store(fake_redis: fakeredis.FakeRedis, scheduler: ManualScheduler) -> Generator[SessionStore, None, None]:
    """Process-wide store wired like the app (event relay included), on a manual clock."""

    reset_store_for_tests()
    store = init_store(engine=build_engine(settings=GameSettings(), scheduler=scheduler))
    yield store
    reset_store_for_tests()


@pytest.fixture()
def client(app_store: SessionStore):
    from fastapi.testclient import TestClient

    from clicker.main import app

    with TestClient(app) as c:
        yield c
