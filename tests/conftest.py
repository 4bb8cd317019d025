"""Pytest fixtures: per-test SQLite database and an isolated change feed."""
import uuid
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from festhub.database import Base, get_db
from festhub.main import app
from festhub.realtime import ChangeFeed, get_change_feed
from festhub.storage import LocalObjectStore, get_object_store

# Import all models so they register with Base.metadata
from festhub.models.user import User, UserRole             # noqa: F401
from festhub.models.event import Event                     # noqa: F401
from festhub.models.starred_event import StarredEvent      # noqa: F401
from festhub.models.update import EventUpdate, FestivalUpdate  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def feed():
    return ChangeFeed()


@pytest.fixture(scope="function")
def media_root(tmp_path):
    return tmp_path / "media"


@pytest.fixture(scope="function")
def client(db_engine, feed, media_root):
    """TestClient with the database, change feed, and object store overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_change_feed] = lambda: feed
    app.dependency_overrides[get_object_store] = lambda: LocalObjectStore(str(media_root), "http://media.test")
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create users / events via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, name: str = "Test User", **profile) -> dict:
    """Helper: POST /api/users and return response JSON."""
    suffix = uuid.uuid4().hex[:8]
    resp = client.post("/api/users/", json={
        "auth_id": f"auth-{suffix}",
        "name": name,
        "email": f"{name.lower().replace(' ', '.')}.{suffix}@fest.test",
        **profile,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def set_role(db, user_id: str, role: UserRole) -> None:
    """Roles other than via elevation are provisioned directly in the datastore."""
    user = db.query(User).filter(User.user_id == user_id).one()
    user.role = role
    db.commit()


def create_admin(client: TestClient, db, name: str = "Admin") -> dict:
    user = create_test_user(client, name=name)
    set_role(db, user["user_id"], UserRole.admin)
    return user


def create_organizer(client: TestClient, db, name: str = "Organizer") -> dict:
    user = create_test_user(client, name=name)
    set_role(db, user["user_id"], UserRole.organizer)
    return user


HACKATHON = {
    "name": "Hackathon",
    "category": "competition",
    "date": "2025-05-01",
    "time": "09:00",
    "venue": "Hall A",
}


def submit_event(client: TestClient, actor_id: str, **overrides):
    """Helper: POST /api/events as actor_id, returns the response."""
    return client.post(f"/api/events/?actor_user_id={actor_id}", json={**HACKATHON, **overrides})


def create_published_event(client: TestClient, admin_id: str, **overrides) -> dict:
    resp = submit_event(client, admin_id, **overrides)
    assert resp.status_code == 201, resp.text
    return resp.json()
