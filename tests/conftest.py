import pytest
from fastapi.testclient import TestClient

from app.main import app, limiter
from app.database.supabase_client import get_supabase
from app.core.dependencies import get_current_user_id
from tests.fakes import FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def session():
    """Holds the user the API sees as authenticated; tests switch it with login_as"""
    return {"user": make_user("user-b", "bashir")}


def make_user(user_id, username=None):
    return {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "user_metadata": {"username": username} if username else {},
        "app_metadata": {},
    }


@pytest.fixture
def login_as(session):
    def _login(user_id, username=None):
        session["user"] = make_user(user_id, username)
        return session["user"]
    return _login


@pytest.fixture
def client(db, session):
    limiter.reset()
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: session["user"]
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def group(db):
    """Quiz-gated group administered by user-a, with three active questions"""
    group = db.seed("groups", {
        "id": "group-1",
        "name": "Poetry Circle",
        "description": "Gabay lovers",
        "created_by": "user-a",
        "min_correct_answers": 2,
        "total_questions": 3,
        "is_interest_based": False,
        "last_message_at": None,
    })
    db.seed("group_members", {"group_id": "group-1", "user_id": "user-a", "is_admin": True, "joined_by_quiz": False})
    db.seed(
        "group_puzzles",
        {"id": "q1", "group_id": "group-1", "question": "2+2?", "options": ["3", "4", "5", "6"], "correct_answer": 1, "is_active": True},
        {"id": "q2", "group_id": "group-1", "question": "Capital?", "options": '["Muqdisho", "Hargeysa"]', "correct_answer": 0, "is_active": True},
        {"id": "q3", "group_id": "group-1", "question": "Sky?", "options": ["Blue", "Green"], "correct_answer": 0, "is_active": True},
        {"id": "q-old", "group_id": "group-1", "question": "Retired?", "options": ["x", "y"], "correct_answer": 0, "is_active": False},
    )
    return group
