from __future__ import annotations

import asyncio
import json
import logging

import fakeredis
import pytest
from fastapi.testclient import TestClient

from catmouse.api.models import Player
from catmouse.broadcast import NoopPublisher, RedisStreamPublisher
from catmouse.events import GameEvent
from catmouse.main import app
from catmouse.streams import EVENTS_STREAM_KEY


def _join(client: TestClient, username: str) -> dict:
    resp = client.post("/players", json={"username": username, "latitude": "45.0", "longitude": "4.0"})
    assert resp.status_code in (200, 201)
    return resp.json()


def test_event_message_uses_wire_field_names() -> None:
    player = Player(id=3, username="alice", latitude="1", longitude="2")
    msg = GameEvent.now(type="PLAYER_JOINED", data=player).to_message()

    assert msg["type"] == "PLAYER_JOINED"
    assert msg["data"]["isActive"] is True
    assert msg["data"]["role"] == "Souris"
    assert "ts" in msg


def test_noop_publisher_only_logs(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="catmouse.broadcast")

    asyncio.run(NoopPublisher().publish(GameEvent.now(type="ZONE_CREATED", data={"id": 1})))

    assert "Would broadcast: ZONE_CREATED" in caplog.text


def test_default_runtime_does_not_push(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="catmouse.broadcast")

    _join(client, "alice")

    assert app.state.runtime.publisher.name == "noop"
    assert "Would broadcast: PLAYER_JOINED" in caplog.text
    assert client.get("/events").status_code == 404


def test_redis_publisher_appends_to_stream() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    publisher = RedisStreamPublisher(r)

    asyncio.run(publisher.publish(GameEvent.now(type="GAME_STATE_CHANGED", data={"id": 1, "isRunning": True})))

    entries = r.xrange(EVENTS_STREAM_KEY)
    assert len(entries) == 1
    _, fields = entries[0]
    assert fields["type"] == "GAME_STATE_CHANGED"
    assert json.loads(fields["data"]) == {"id": 1, "isRunning": True}


def test_events_endpoint_reads_back_published_events(
    client_and_redis: tuple[TestClient, fakeredis.FakeRedis],
) -> None:
    client, r = client_and_redis

    pid = _join(client, "alice")["id"]
    client.patch(f"/players/{pid}/position", json={"latitude": "45.2", "longitude": "4.2"})
    client.patch(f"/players/{pid}/disconnect")
    _join(client, "alice")

    resp = client.get("/events?count=50")
    assert resp.status_code == 200
    data = resp.json()
    assert data["stream"] == EVENTS_STREAM_KEY

    types = [m["fields"]["type"] for m in data["messages"]]
    assert types == ["PLAYER_JOINED", "PLAYER_MOVED", "PLAYER_DISCONNECTED", "PLAYER_REJOINED"]
    assert json.loads(data["messages"][1]["fields"]["data"])["latitude"] == "45.2"

    assert client.get("/events?count=0").status_code == 400


def test_wheel_and_session_events(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    _join(client, "alice")
    _join(client, "bob1")
    sid = client.get("/session").json()["id"]

    client.post(f"/session/{sid}/start")

    types = [fields["type"] for _, fields in r.xrange(EVENTS_STREAM_KEY)]
    assert types[-3:] == ["WHEEL_SPUN", "PLAYER_ROLE_CHANGED", "GAME_STATE_CHANGED"]


def test_ws_receives_events_when_hub_publisher_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATMOUSE_BROADCAST", "ws")

    with TestClient(app) as client:
        assert app.state.runtime.publisher.name == "ws"

        with client.websocket_connect("/") as ws:
            res = client.post("/zones", json={"name": "Park", "coordinates": "[]"})
            assert res.status_code == 201

            msg = ws.receive_json()
            assert msg["type"] == "ZONE_CREATED"
            assert msg["data"] == res.json()
