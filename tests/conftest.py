"""
Shared pytest fixtures.

Uses a throwaway SQLite database; every test gets its own save slot so
tests never see each other's careers.
"""
import os
import uuid

SQLITE_URL = "sqlite:///./test_soundempire.db"
os.environ.setdefault("DATABASE_URL", SQLITE_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from soundempire.db.base import Base, get_db  # noqa: E402
from soundempire.main import app  # noqa: E402
from soundempire.routers.deps import get_rng, get_slot  # noqa: E402
from soundempire.schemas.career import Profile  # noqa: E402
from soundempire.services import career  # noqa: E402
from soundempire.services.rng import RandomSource  # noqa: E402

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class ScriptedRandom(RandomSource):
    """Replays `values` from random(), then returns `fallback` forever."""

    def __init__(self, values=(), fallback=0.5):
        super().__init__(seed=0)
        self.values = list(values)
        self.fallback = fallback

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.fallback


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def slot():
    return f"test-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def scripted():
    """The ScriptedRandom class, for tests that need exact arithmetic."""
    return ScriptedRandom


@pytest.fixture()
def rng():
    return RandomSource(seed=1234)


@pytest.fixture()
def new_career():
    """A freshly created career: week 1 of 2025, default stats."""
    state = career.initial_state()
    return career.create_profile(state, Profile(artist_name="Nova Reyes"), RandomSource(seed=7)).state


@pytest.fixture()
def client(slot):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_slot] = lambda: slot
    shared_rng = RandomSource(seed=42)
    app.dependency_overrides[get_rng] = lambda: shared_rng
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def session_factory():
    """For tests that need one session per thread."""
    return TestingSessionLocal
