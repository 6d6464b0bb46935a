from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class ReadinessProvider(Protocol):
    """Identity bootstrap seen by the engine as a readiness gate.

    The id is only displayed; no game logic depends on it.
    """

    def is_ready(self) -> bool:  # pragma: no cover
        ...

    def id(self) -> str | None:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class Identity:
    user_id: str
    anonymous: bool


class AnonymousIdentity:
    """Always ready; hands out a random id."""

    def __init__(self) -> None:
        self._id = str(uuid4())

    def is_ready(self) -> bool:
        return True

    def id(self) -> str | None:
        return self._id


@dataclass(frozen=True, slots=True)
class StaticIdentity:
    user_id: str

    def is_ready(self) -> bool:
        return bool(self.user_id)

    def id(self) -> str | None:
        return self.user_id or None


class EnvIdentity:
    """Reads the player id from `CLICKER_USER_ID`; not ready when it is unset."""

    def __init__(self, var: str = "CLICKER_USER_ID") -> None:
        self.var = var

    def is_ready(self) -> bool:
        return bool(os.environ.get(self.var, "").strip())

    def id(self) -> str | None:
        value = os.environ.get(self.var, "").strip()
        return value or None


def resolve_identity(provider: ReadinessProvider | None) -> Identity:
    """Resolve a player identity, falling back to an anonymous one.

    Never raises: a broken provider must not keep the game from starting.
    """

    if provider is None:
        return Identity(user_id=str(AnonymousIdentity().id()), anonymous=True)

    try:
        if provider.is_ready():
            user_id = provider.id()
            if user_id:
                return Identity(user_id=user_id, anonymous=False)
            logger.warning("Identity provider %s is ready but returned no id", type(provider).__name__)
        else:
            logger.warning("Identity provider %s is not ready", type(provider).__name__)
    except Exception:
        logger.warning("Identity provider %s failed", type(provider).__name__, exc_info=True)

    fallback = Identity(user_id=str(AnonymousIdentity().id()), anonymous=True)
    logger.info("No authenticated user, using random id %s", fallback.user_id)
    return fallback
