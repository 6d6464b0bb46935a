from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clicker.core.timers import ManualScheduler
from clicker.session_store import SessionStore


def _create(client: TestClient, **body: object) -> dict:
    resp = client.post("/session", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_healthcheck_and_info(client: TestClient) -> None:
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "goblin-clicker"


def test_post_session_starts_at_level_one(client: TestClient) -> None:
    data = _create(client, player_id="alice")

    assert data["player_id"] == "alice"
    assert data["anonymous"] is False
    assert data["level"] == 1
    assert data["gold"] == 0
    assert data["click_damage"] == 1
    assert data["upgrade_cost"] == 10
    assert data["can_afford_upgrade"] is False
    assert data["monster"] == {
        "name": "Goblin",
        "level": 1,
        "max_hp": 60,
        "current_hp": 60,
        "phase": "alive",
        "display_hp": 60,
        "hp_percentage": 100.0,
    }
    assert data["message"] == "Goblin Lv. 1 appeared!"


def test_post_session_without_body_is_anonymous(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CLICKER_USER_ID", raising=False)

    resp = client.post("/session")
    assert resp.status_code == 201
    data = resp.json()
    assert data["player_id"]
    assert data["anonymous"] is True


def test_post_session_uses_deployment_identity(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLICKER_USER_ID", "platform-user")

    data = _create(client)
    assert data["player_id"] == "platform-user"
    assert data["anonymous"] is False


def test_full_monster_cycle_over_http(client: TestClient, scheduler: ManualScheduler) -> None:
    sid = _create(client)["session_id"]

    for _ in range(59):
        assert client.post(f"/session/{sid}/click").status_code == 200

    data = client.post(f"/session/{sid}/click").json()
    assert data["gold"] == 5
    assert data["monster"]["phase"] == "defeated"
    assert data["monster"]["display_hp"] == 0
    assert data["message"] == "Goblin defeated! You earned 5 gold."

    # Clicking while the goblin is down changes nothing.
    again = client.post(f"/session/{sid}/click").json()
    assert again["gold"] == 5
    assert again["total_clicks"] == 60

    scheduler.advance(1.0)

    data = client.get(f"/session/{sid}").json()
    assert data["level"] == 2
    assert data["monster"]["max_hp"] == 70
    assert data["monster"]["phase"] == "alive"


def test_upgrade_success(client: TestClient, app_store: SessionStore) -> None:
    sid = _create(client)["session_id"]
    app_store.require_session(sid).gold = 10

    resp = client.post(f"/session/{sid}/upgrade")
    assert resp.status_code == 200
    data = resp.json()
    assert data["gold"] == 0
    assert data["click_damage"] == 2
    assert data["upgrade_cost"] == 15
    assert data["message"] == "You bought Power Click! Damage per click: 2"


def test_upgrade_insufficient_funds_is_422_and_changes_nothing(client: TestClient, app_store: SessionStore) -> None:
    sid = _create(client)["session_id"]
    app_store.require_session(sid).gold = 5
    before = client.get(f"/session/{sid}").json()

    resp = client.post(f"/session/{sid}/upgrade")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Not enough gold for this upgrade!"

    assert client.get(f"/session/{sid}").json() == before


def test_reset_and_delete(client: TestClient, app_store: SessionStore, scheduler: ManualScheduler) -> None:
    sid = _create(client)["session_id"]
    session = app_store.require_session(sid)
    session.click_damage = 500
    client.post(f"/session/{sid}/click")
    assert scheduler.pending == 1

    data = client.post(f"/session/{sid}/reset").json()
    assert data["level"] == 1
    assert data["gold"] == 0
    assert data["click_damage"] == 1
    assert scheduler.pending == 0

    assert client.delete(f"/session/{sid}").status_code == 204
    assert client.get(f"/session/{sid}").status_code == 404
    assert client.delete(f"/session/{sid}").status_code == 404


def test_list_sessions(client: TestClient) -> None:
    first = _create(client, player_id="a")
    second = _create(client, player_id="b")

    resp = client.get("/session")
    assert resp.status_code == 200
    ids = [s["session_id"] for s in resp.json()["sessions"]]
    assert set(ids) == {first["session_id"], second["session_id"]}


def test_unknown_session_404(client: TestClient) -> None:
    missing = "00000000-0000-0000-0000-000000000000"
    assert client.get(f"/session/{missing}").status_code == 404
    assert client.post(f"/session/{missing}/click").status_code == 404
    assert client.post(f"/session/{missing}/upgrade").status_code == 404
    assert client.post(f"/session/{missing}/reset").status_code == 404


def test_generic_action_endpoint(client: TestClient) -> None:
    sid = _create(client)["session_id"]

    resp = client.post(f"/sessions/{sid}/actions/click")
    assert resp.status_code == 200
    body = resp.json()
    assert body["state"]["monster"]["current_hp"] == 59
    assert [e["type"] for e in body["events"]] == ["MONSTER_HIT"]

    resp2 = client.post(f"/sessions/{sid}/actions/upgrade")
    assert resp2.status_code == 422

    resp3 = client.post(f"/sessions/{sid}/actions/dance")
    assert resp3.status_code == 422
    assert resp3.json()["detail"] == "Unknown action: dance"
