import os
import tempfile
from datetime import date, datetime, timedelta, timezone
from typing import Generator

import pytest

# must be set before the app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_PATH", tempfile.mkdtemp(prefix="rsvp-logs-"))
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rsvp.app.core.errors import StoreError
from rsvp.app.main import app
from rsvp.app.routers.deps import get_session_manager
from rsvp.app.schemas.event import EventIn
from rsvp.app.schemas.user import UserCreate
from rsvp.app.services import events as events_service
from rsvp.app.services import users as users_service
from rsvp.app.services.auth import InMemorySessionStore, SessionManager
from rsvp.db import Base
from rsvp.db.session import get_db, init_db, make_engine
from rsvp.db.store import Store


class FaultyStore(Store):
    """Store that raises StoreError for chosen (operation, table) pairs."""

    def __init__(self, session, failures=()):
        super().__init__(session)
        self.failures = set(failures)
        self.calls = []

    def _maybe_fail(self, operation, table):
        self.calls.append((operation, table))
        if (operation, table) in self.failures:
            raise StoreError(f"Could not {operation} {table}.")

    def insert(self, table, rows):
        self._maybe_fail("insert", table)
        return super().insert(table, rows)

    def update(self, table, row_id, values):
        self._maybe_fail("update", table)
        return super().update(table, row_id, values)

    def delete(self, table, ids):
        self._maybe_fail("delete", table)
        return super().delete(table, ids)

    def count(self, table, filters=None):
        self._maybe_fail("count", table)
        return super().count(table, filters)

    def count_by(self, table, column, filters=None):
        self._maybe_fail("count", table)
        return super().count_by(table, column, filters)


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    engine = make_engine("sqlite://", poolclass=StaticPool)

    # enforce foreign keys the way Postgres would
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    init_db(engine)
    TestingSession = sessionmaker(autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def store(db) -> Store:
    return Store(db)


@pytest.fixture()
def faulty_store(db):
    def make(*failures):
        return FaultyStore(db, failures)
    return make


@pytest.fixture()
def client(db) -> Generator[TestClient, None, None]:
    manager = SessionManager(InMemorySessionStore())

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_manager] = lambda: manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(store):
    def make(login="organizer", role="organizer", password="secret1", **extra):
        data = UserCreate(
            login=login,
            name=extra.pop("name", login.title()),
            password=password,
            role=role,
            password_change_required=extra.pop("password_change_required", False),
            **extra,
        )
        return users_service.create_user(store, data)
    return make


def build_event_payload(**overrides) -> EventIn:
    start = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)
    values = {
        "title": "Spring meetup",
        "additional_info": "Bring a friend",
        "event_date": date(2026, 5, 1),
        "start_datetime": start,
        "end_datetime": start + timedelta(hours=3),
        "status": "active",
    }
    values.update(overrides)
    return EventIn(**values)


def build_sample_questions():
    return [
        {"text": "Your name", "type": "short_text", "required": True},
        {"text": "Favourite colour", "type": "multiple_choice", "options": ["Red", "Blue", "Green"]},
        {"text": "Arrival", "type": "time"},
        {"text": "Who comes with you", "type": "text_list"},
    ]


@pytest.fixture()
def make_event(store):
    def make(questions=None, created_by=None, **overrides):
        payload = build_event_payload(**overrides)
        drafts = build_sample_questions() if questions is None else questions
        event_id = events_service.create_event_with_questions(store, payload, drafts, created_by)
        return events_service.fetch_event_by_id(store, event_id)
    return make


@pytest.fixture()
def event_payload():
    return build_event_payload


@pytest.fixture()
def sample_questions():
    return build_sample_questions()
