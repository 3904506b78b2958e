import pytest

API = "/api/v1"


@pytest.fixture
def members(db, group):
    db.seed("group_members", {"group_id": "group-1", "user_id": "user-b", "is_admin": False})


def _start(client, login_as):
    login_as("user-a", "amina")
    response = client.post(f"{API}/groups/group-1/calls")
    assert response.status_code == 201
    return response.json()


def test_start_call_registers_starter_and_announces(client, db, members, login_as):
    call = _start(client, login_as)

    assert call["started_by"] == "user-a"
    assert call["is_active"] is True
    assert [p["user_id"] for p in db.rows("call_participants", call_id=call["id"])] == ["user-a"]
    notices = db.rows("messages", group_id="group-1", is_system_message=True)
    assert [m["content"] for m in notices] == ["amina started a voice call"]

    active = client.get(f"{API}/groups/group-1/calls/active")
    assert active.json()["id"] == call["id"]


def test_second_call_in_group_is_conflict(client, db, members, login_as):
    _start(client, login_as)
    login_as("user-b")
    assert client.post(f"{API}/groups/group-1/calls").status_code == 409
    assert len(db.rows("call_sessions")) == 1


def test_non_member_cannot_start_or_join(client, db, group, login_as):
    assert client.post(f"{API}/groups/group-1/calls").status_code == 403
    call = _start(client, login_as)
    login_as("user-z")
    assert client.post(f"{API}/calls/{call['id']}/join").status_code == 403


def test_participant_leaving_keeps_call_open(client, db, members, login_as):
    call = _start(client, login_as)
    login_as("user-b", "bashir")
    assert client.post(f"{API}/calls/{call['id']}/join").status_code == 200

    left = client.post(f"{API}/calls/{call['id']}/end")

    assert left.json() == {"call_id": call["id"], "ended_for_everyone": False}
    assert db.rows("call_sessions", id=call["id"])[0]["is_active"] is True
    assert db.rows("call_participants", call_id=call["id"], user_id="user-b")[0]["left_at"] is not None
    assert db.rows("messages", is_system_message=True)[-1]["content"] == "bashir left the voice call"


def test_rejoining_clears_left_at(client, db, members, login_as):
    call = _start(client, login_as)
    login_as("user-b")
    client.post(f"{API}/calls/{call['id']}/join")
    client.post(f"{API}/calls/{call['id']}/end")

    client.post(f"{API}/calls/{call['id']}/join")

    rows = db.rows("call_participants", call_id=call["id"], user_id="user-b")
    assert len(rows) == 1
    assert rows[0]["left_at"] is None


def test_starter_ends_call_for_everyone(client, db, members, login_as):
    call = _start(client, login_as)

    ended = client.post(f"{API}/calls/{call['id']}/end")

    assert ended.json()["ended_for_everyone"] is True
    session = db.rows("call_sessions", id=call["id"])[0]
    assert session["is_active"] is False
    assert session["ended_at"] is not None
    assert db.rows("messages", is_system_message=True)[-1]["content"] == "amina ended the voice call"
    assert client.get(f"{API}/groups/group-1/calls/active").json() is None

    login_as("user-b")
    assert client.post(f"{API}/calls/{call['id']}/join").status_code == 409


def test_unknown_call_is_not_found(client):
    assert client.post(f"{API}/calls/missing/join").status_code == 404


def test_ice_servers(client):
    servers = client.get(f"{API}/calls/ice-servers").json()["ice_servers"]
    assert servers
    assert all(s["urls"].startswith("stun:") for s in servers)
