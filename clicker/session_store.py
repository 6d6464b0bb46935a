from __future__ import annotations

import logging
from uuid import UUID

from clicker.api.models import SessionState
from clicker.core.identity import ReadinessProvider
from clicker.progression import ProgressionEngine

logger = logging.getLogger(__name__)


class SessionNotFoundError(ValueError):
    def __init__(self, session_id: UUID | str) -> None:
        super().__init__("Session not found")
        self.session_id = str(session_id)


class SessionStore:
    """In-process registry of live sessions.

    Sessions are never persisted; they live until deleted or the process exits.
    """

    def __init__(self, engine: ProgressionEngine) -> None:
        self.engine = engine
        self._sessions: dict[str, SessionState] = {}

    def create_session(self, provider: ReadinessProvider | None = None) -> SessionState:
        session = self.engine.start_session(provider)
        self._sessions[str(session.session_id)] = session
        return session

    def get_session(self, session_id: UUID | str) -> SessionState | None:
        return self._sessions.get(str(session_id))

    def require_session(self, session_id: UUID | str) -> SessionState:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> list[SessionState]:
        out = list(self._sessions.values())
        out.sort(key=lambda s: s.created_at, reverse=True)
        return out

    def reset_session(self, session_id: UUID | str) -> SessionState:
        session = self.require_session(session_id)
        return self.engine.reset_session(session)

    def delete_session(self, session_id: UUID | str) -> None:
        session = self.require_session(session_id)
        self.engine.cancel_pending(session)
        del self._sessions[str(session.session_id)]
        logger.info("Session %s deleted", session.session_id)


_STORE: SessionStore | None = None


def init_store(*, engine: ProgressionEngine) -> SessionStore:
    """Create the process-wide store once.

    Safe to call multiple times; subsequent calls return the existing instance.
    """

    global _STORE
    if _STORE is None:
        _STORE = SessionStore(engine)
    return _STORE


def reset_store_for_tests() -> None:
    global _STORE
    _STORE = None


def get_store() -> SessionStore:
    if _STORE is None:
        raise RuntimeError("Session store not initialized. Call init_store() at startup.")
    return _STORE
