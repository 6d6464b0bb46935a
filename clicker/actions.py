from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from clicker.api.models import SessionState
from clicker.core.events import GameEvent
from clicker.session_store import SessionStore, get_store


ActionName = Literal["click", "upgrade"]
ACTION_NAMES: frozenset[str] = frozenset({"click", "upgrade"})


@dataclass(frozen=True, slots=True)
class ActionResult:
    state: SessionState
    events: list[GameEvent]


def dispatch_action(
    *,
    session_id: UUID | str,
    action: ActionName | str,
    store: SessionStore | None = None,
) -> ActionResult:
    """Entry point for every player action.

    Applies an action by:
    - looking up the live session
    - running the matching engine operation
    - collecting the events it emitted (listeners such as the relay see them too)

    Raises ValueError for unknown actions, unknown sessions and failed purchases.
    """

    if action not in ACTION_NAMES:
        raise ValueError(f"Unknown action: {action}")

    store = store or get_store()
    session = store.require_session(session_id)

    events: list[GameEvent] = []
    unsubscribe = store.engine.subscribe(events.append)
    try:
        if action == "click":
            store.engine.apply_click(session)
        else:
            store.engine.purchase_upgrade(session)
    finally:
        unsubscribe()

    return ActionResult(state=session, events=events)
