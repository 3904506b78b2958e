import asyncio
import itertools
import json

import pytest
from fastapi import HTTPException
from fastapi.websockets import WebSocketDisconnect

from app.core.dependencies import get_auth_service
from app.main import app
from app.modules.calls.signaling import SignalingHub, get_signaling_hub, peers_to_offer, should_initiate_offer
from tests.conftest import make_user

NAMES = {"user-a": "amina", "user-b": "bashir", "user-c": "cali"}


class FakeAuthService:
    """Treats the token as the user id; 'bad' is rejected"""

    def get_current_user(self, token):
        if token == "bad":
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        return make_user(token, NAMES.get(token))


@pytest.fixture
def hub():
    return SignalingHub()


@pytest.fixture
def signaling(client, db, group, hub):
    db.seed("group_members", {"group_id": "group-1", "user_id": "user-b", "is_admin": False})
    db.seed("call_sessions", {"id": "call-1", "group_id": "group-1", "started_by": "user-a", "is_active": True})
    db.seed("call_sessions", {"id": "call-old", "group_id": "group-1", "started_by": "user-a", "is_active": False})
    app.dependency_overrides[get_auth_service] = lambda: FakeAuthService()
    app.dependency_overrides[get_signaling_hub] = lambda: hub
    return client


def _connect(client, user_id, call_id="call-1"):
    return client.websocket_connect(f"/api/v1/calls/{call_id}/signal?token={user_id}")


def test_exactly_one_side_of_each_pair_offers():
    ids = ["user-a", "user-b", "user-c", "0", "Z"]
    for a, b in itertools.permutations(ids, 2):
        assert should_initiate_offer(a, b) != should_initiate_offer(b, a)
    assert peers_to_offer("user-b", ["user-c", "user-a", "user-b", "user-c"]) == ["user-c"]
    assert peers_to_offer("user-c", ["user-a", "user-b"]) == []


def test_presence_and_offer_relay(signaling):
    with _connect(signaling, "user-a") as ws_a:
        first = ws_a.receive_json()
        assert first["event"] == "presence"
        assert [p["id"] for p in first["participants"]] == ["user-a"]

        with _connect(signaling, "user-b") as ws_b:
            presence_a = ws_a.receive_json()
            presence_b = ws_b.receive_json()
            assert [p["id"] for p in presence_a["participants"]] == ["user-a", "user-b"]
            assert presence_a["offer_to"] == ["user-b"]
            assert presence_b["offer_to"] == []
            assert presence_b["participants"][0]["name"] == "amina"

            ws_a.send_text(json.dumps({"type": "offer", "to": "user-b", "sdp": {"type": "offer", "sdp": "v=0"}}))
            offer = ws_b.receive_json()
            assert offer == {"type": "offer", "to": "user-b", "sdp": {"type": "offer", "sdp": "v=0"}, "from": "user-a"}

            ws_b.send_text(json.dumps({"type": "ice-candidate", "to": "user-a", "candidate": {"candidate": "c1"}, "from": "spoofed"}))
            candidate = ws_a.receive_json()
            assert candidate["from"] == "user-b"
            assert candidate["candidate"] == {"candidate": "c1"}

        after_leave = ws_a.receive_json()
        assert [p["id"] for p in after_leave["participants"]] == ["user-a"]


def test_bad_frames_get_error_events(signaling):
    with _connect(signaling, "user-a") as ws:
        ws.receive_json()

        ws.send_text("not json")
        assert ws.receive_json() == {"event": "error", "detail": "Malformed signaling frame"}

        ws.send_text(json.dumps({"type": "hangup", "to": "user-b"}))
        assert ws.receive_json() == {"event": "error", "detail": "Unknown signaling message type"}

        ws.send_text(json.dumps({"type": "answer"}))
        assert ws.receive_json()["event"] == "error"

        ws.send_text(json.dumps({"type": "offer", "to": "user-a"}))
        assert ws.receive_json() == {"event": "error", "detail": "Cannot signal yourself"}


def test_frame_to_absent_peer_is_dropped(signaling, hub):
    with _connect(signaling, "user-a") as ws:
        ws.receive_json()
        ws.send_text(json.dumps({"type": "offer", "to": "user-b", "sdp": "x"}))
        ws.send_text("[]")
        assert ws.receive_json() == {"event": "error", "detail": "Malformed signaling frame"}
        assert hub.is_connected("call-1", "user-a")


@pytest.mark.parametrize("token, call_id", [
    ("bad", "call-1"),
    ("user-z", "call-1"),
    ("user-a", "call-old"),
    ("user-a", "missing"),
])
def test_rejected_connections(signaling, hub, token, call_id):
    with pytest.raises(WebSocketDisconnect):
        with _connect(signaling, token, call_id) as ws:
            ws.receive_json()
    assert hub.participants(call_id) == []


class RecordingSocket:
    def __init__(self):
        self.sent = []
        self.broken = False
        self.closed = False

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket is gone")
        self.sent.append(message)

    async def close(self, code=1000):
        self.closed = True


def _presence_ids(socket):
    presence = [m for m in socket.sent if m.get("event") == "presence"]
    return [p["id"] for p in presence[-1]["participants"]]


def test_dead_peer_is_dropped_and_others_are_told():
    async def scenario():
        hub = SignalingHub()
        sockets = {user_id: RecordingSocket() for user_id in ("user-a", "user-b", "user-c")}
        for user_id, socket in sockets.items():
            await hub.connect("call-1", user_id, NAMES[user_id], socket)

        sockets["user-c"].broken = True
        delivered = await hub.relay("call-1", "user-a", json.dumps({"type": "offer", "to": "user-c", "sdp": "x"}))
        return hub, sockets, delivered

    hub, sockets, delivered = asyncio.run(scenario())

    assert delivered is False
    assert not hub.is_connected("call-1", "user-c")
    assert _presence_ids(sockets["user-a"]) == ["user-a", "user-b"]
    assert _presence_ids(sockets["user-b"]) == ["user-a", "user-b"]


def test_dead_peer_found_during_presence_broadcast():
    async def scenario():
        hub = SignalingHub()
        a, b, c = RecordingSocket(), RecordingSocket(), RecordingSocket()
        await hub.connect("call-1", "user-a", "amina", a)
        await hub.connect("call-1", "user-b", "bashir", b)
        b.broken = True
        await hub.connect("call-1", "user-c", "cali", c)
        return hub, a, c

    hub, a, c = asyncio.run(scenario())

    assert [p["id"] for p in hub.participants("call-1")] == ["user-a", "user-c"]
    assert _presence_ids(a) == ["user-a", "user-c"]
    assert _presence_ids(c) == ["user-a", "user-c"]
