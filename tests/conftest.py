from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.db.db import get_session, register_sqlite_functions
from app.models.principal import Principal, Role
from app.services.catalog import CategoryCatalog
from app.services.claim_registry import ClaimRegistry
from app.services.item_registry import ItemRegistry

JWT_SECRET = "test-secret"


class FakeClock:
    """Ticks one second per call so created_at ordering is deterministic."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        CategoryCatalog(session).seed_defaults()
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def items(session, clock):
    return ItemRegistry(session, clock=clock)


@pytest.fixture
def claims(session, clock):
    return ClaimRegistry(session, clock=clock)


@pytest.fixture
def alice():
    return Principal(id="user-alice")


@pytest.fixture
def bob():
    return Principal(id="user-bob")


@pytest.fixture
def carol():
    return Principal(id="user-carol")


@pytest.fixture
def admin():
    return Principal(id="admin-1", role=Role.ADMIN)


def backpack_draft(**overrides):
    draft = {
        "title": "Blue Backpack",
        "category": "Bags",
        "location_found": "Library",
        "date_found": "2024-01-10",
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def backpack(items, alice):
    return items.create(alice, backpack_draft())


def yesterday():
    return datetime.now(timezone.utc).date() - timedelta(days=1)


def tomorrow():
    return datetime.now(timezone.utc).date() + timedelta(days=1)


def token_for(principal_id, role="member"):
    return jwt.encode({"sub": principal_id, "role": role}, JWT_SECRET, algorithm="HS256")


def auth(principal: Principal):
    return {"Authorization": f"Bearer {token_for(principal.id, principal.role.value)}"}


@pytest.fixture
def client(engine, session, monkeypatch):
    from fastapi.testclient import TestClient
    from app.main import app

    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)

    def get_test_session():
        with Session(engine) as test_session:
            yield test_session

    app.dependency_overrides[get_session] = get_test_session

    yield TestClient(app)

    app.dependency_overrides.clear()
