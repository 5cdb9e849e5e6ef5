import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  registers the tables on Base
from database import Base, get_db
from main import app
from schemas import AppState, LineItem, Person


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


class FakeTimer:
    """Stands in for threading.Timer; fires only when a test says so."""

    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Runs even when cancelled, like a real timer that was already on its way
        self.function(*self.args)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_pending(self):
        fired = 0
        for timer in self.live:
            timer.cancelled = True
            timer.fire()
            fired += 1
        return fired


@pytest.fixture
def timers():
    return FakeTimerFactory()


def make_person(name, *amounts, person_id=None):
    return Person(
        id=person_id or f"p-{name or 'blank'}",
        name=name,
        items=[LineItem(id=f"{name}-{n}", name=f"item {n}", amount_cents=a) for n, a in enumerate(amounts)],
    )


@pytest.fixture
def dinner():
    return AppState(
        people=[
            make_person("Alice", 5000),
            make_person("Bob", 1000, 500),
            make_person("Carol"),
        ],
        currency="€",
        event_name="Friday dinner",
    )
