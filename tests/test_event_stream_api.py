from __future__ import annotations

import fakeredis
from fastapi.testclient import TestClient

from clicker.core.events import GameEvent
from clicker.core.timers import ManualScheduler
from clicker.relay import EventRelay
from clicker.streams import SessionStream, publish_event, read_events


def test_publish_and_read_session_stream() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    event = GameEvent.now(type="MONSTER_DEFEATED", session_id="s1", payload={"level": 3, "gold_earned": 15})

    publish_event(r=r, event=event)

    entries = read_events(r=r, session_id="s1")
    assert len(entries) == 1
    _, fields = entries[0]
    assert fields["type"] == "MONSTER_DEFEATED"
    assert fields["level"] == "3"
    assert fields["gold_earned"] == "15"
    assert SessionStream(session_id="s1").key == "events:session:s1"


def test_relay_publishes_without_event_loop() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    relay = EventRelay(redis_factory=lambda: r)

    relay(GameEvent.now(type="MONSTER_SPAWNED", session_id="s2", payload={"level": 1, "max_hp": 60}))

    assert r.xlen("events:session:s2") == 1


def test_events_endpoint_lists_session_history(client: TestClient, scheduler: ManualScheduler) -> None:
    sid = client.post("/session", json={"player_id": "p1"}).json()["session_id"]

    for _ in range(60):
        client.post(f"/session/{sid}/click")
    # Respawn happens off-request; it still lands in the stream.
    scheduler.advance(1.0)

    resp = client.get(f"/sessions/{sid}/events?count=200")
    assert resp.status_code == 200
    data = resp.json()

    assert data["stream"] == f"events:session:{sid}"
    types = [m["fields"]["type"] for m in data["messages"]]
    assert types[:2] == ["SESSION_STARTED", "MONSTER_SPAWNED"]
    assert types.count("MONSTER_HIT") == 60
    assert types.count("MONSTER_DEFEATED") == 1
    assert types[-1] == "MONSTER_SPAWNED"
    assert data["messages"][-1]["fields"]["level"] == "2"


def test_events_endpoint_validates_count(client: TestClient) -> None:
    sid = client.post("/session", json={}).json()["session_id"]

    assert client.get(f"/sessions/{sid}/events?count=0").status_code == 422
    assert client.get(f"/sessions/{sid}/events?count=201").status_code == 422
