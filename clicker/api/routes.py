from __future__ import annotations

from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from clicker.actions import dispatch_action
from clicker.api.deps import get_redis, get_session_store
from clicker.api.models import ActionResponse, SessionCreateRequest, SessionListResponse, SessionState
from clicker.core.identity import EnvIdentity, StaticIdentity
from clicker.session_store import SessionNotFoundError, SessionStore
from clicker.streams import SessionStream, read_events
from clicker.websocket_hub import hub

router = APIRouter()


def _action_error(e: ValueError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(
    websocket: WebSocket,
    session_id: UUID,
    store: SessionStore = Depends(get_session_store),
) -> None:
    session = store.get_session(session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    sid = str(session_id)
    await hub.connect(sid, websocket, snapshot=session)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(sid, websocket)
    except Exception:
        await hub.disconnect(sid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest | None = None,
    store: SessionStore = Depends(get_session_store),
) -> SessionState:
    player_id = payload.player_id if payload is not None else None
    # Without an explicit id, fall back to the deployment-provided one (or anonymous).
    provider = StaticIdentity(player_id) if player_id else EnvIdentity()
    return store.create_session(provider)


@router.get("/session", response_model=SessionListResponse)
async def list_sessions_route(store: SessionStore = Depends(get_session_store)) -> SessionListResponse:
    return SessionListResponse(sessions=store.list_sessions())


@router.get("/session/{session_id}", response_model=SessionState)
async def get_session_route(session_id: UUID, store: SessionStore = Depends(get_session_store)) -> SessionState:
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.delete("/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: UUID, store: SessionStore = Depends(get_session_store)) -> Response:
    try:
        store.delete_session(session_id)
    except ValueError as e:
        raise _action_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/session/{session_id}/click", response_model=SessionState)
async def click_route(session_id: UUID, store: SessionStore = Depends(get_session_store)) -> SessionState:
    try:
        result = dispatch_action(session_id=session_id, action="click", store=store)
    except ValueError as e:
        raise _action_error(e) from e
    return result.state


@router.post("/session/{session_id}/upgrade", response_model=SessionState)
async def upgrade_route(session_id: UUID, store: SessionStore = Depends(get_session_store)) -> SessionState:
    try:
        result = dispatch_action(session_id=session_id, action="upgrade", store=store)
    except ValueError as e:
        raise _action_error(e) from e
    return result.state


@router.post("/session/{session_id}/reset", response_model=SessionState)
async def reset_route(session_id: UUID, store: SessionStore = Depends(get_session_store)) -> SessionState:
    try:
        return store.reset_session(session_id)
    except ValueError as e:
        raise _action_error(e) from e


@router.post("/sessions/{session_id}/actions/{action}", response_model=ActionResponse)
async def generic_action_route(
    session_id: UUID,
    action: str,
    store: SessionStore = Depends(get_session_store),
) -> ActionResponse:
    try:
        result = dispatch_action(session_id=session_id, action=action, store=store)
    except ValueError as e:
        raise _action_error(e) from e

    return ActionResponse(state=result.state, events=[ev.as_dict() for ev in result.events])


@router.get("/sessions/{session_id}/events")
async def get_session_events_route(
    session_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a session's event stream.

    Intended for local/dev testing when redis-cli isn't available.
    """

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    sid = str(session_id)
    try:
        entries = read_events(r=r, session_id=sid, count=count, start=start, end=end)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    messages = [{"id": mid, "fields": fields} for mid, fields in entries]
    return {"session_id": sid, "stream": SessionStream(session_id=sid).key, "messages": messages}
