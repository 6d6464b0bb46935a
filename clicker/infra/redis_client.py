from __future__ import annotations

import os

import redis


_SHARED: redis.Redis | None = None


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def get_shared_redis() -> redis.Redis:
    """Process-wide client shared by routes and the event relay.

    Timer callbacks publish outside of any request, so there is no per-request client to borrow.
    """

    global _SHARED
    if _SHARED is None:
        _SHARED = create_redis()
    return _SHARED


def set_shared_redis(client: redis.Redis | None) -> None:
    """Swap the shared client (tests install a fakeredis instance here)."""

    global _SHARED
    _SHARED = client
