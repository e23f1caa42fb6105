"""
Shared fixtures: deterministic number sources, fresh game records, and an API
client bound to a throwaway SQLite database.
"""

import os

# Keep password hashing fast in tests
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from numberguess.api.database import Base, get_db
from numberguess.api.main import app, get_number_source
from numberguess.engine.actions import reset_game
from numberguess.engine.reducer import apply_action
from numberguess.engine.utils import instantiate


class FixedNumberSource:
    """Draws the given values in order, repeating the last one."""

    def __init__(self, *values: int):
        self.values = list(values)
        self.calls = []

    def next_in_range(self, low: int, high: int) -> int:
        self.calls.append((low, high))
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


@pytest.fixture
def fixed_source():
    return FixedNumberSource(42)


@pytest.fixture
def records():
    """(admin, state) right after instantiation by "admin"."""
    admin, state, _ = instantiate("admin")
    return admin, state


@pytest.fixture
def started(records, fixed_source):
    """(admin, state) with a round started on target 42."""
    admin, state = records
    state, _ = apply_action(state, admin, reset_game("admin"), fixed_source)
    return admin, state


@pytest.fixture
def session_factory(tmp_path):
    """Sessions on a throwaway SQLite file, for seeding records directly."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    TestingSession = session_factory

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    source = FixedNumberSource(42)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_number_source] = lambda: source
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(client: TestClient, username: str, password: str = "secret-pass") -> dict[str, str]:
    """Register (or log in) a player and return bearer headers."""
    resp = client.post("/auth/register", json={"username": username, "password": password})
    if resp.status_code == 400:
        resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def login(client):
    """login("alice") -> bearer headers for alice."""
    return lambda username: auth_headers(client, username)
