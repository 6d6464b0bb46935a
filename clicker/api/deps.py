from __future__ import annotations

import redis

from clicker.infra.redis_client import get_shared_redis
from clicker.session_store import SessionStore, get_store


def get_redis() -> redis.Redis:
    return get_shared_redis()


def get_session_store() -> SessionStore:
    return get_store()
