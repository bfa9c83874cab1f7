"""
Pytest fixtures: an isolated SQLite database per test, seeded catalog data,
and a FastAPI TestClient wired to that database.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from fulfillment.database import create_db_engine, get_db, init_db
from fulfillment.main import app
from fulfillment.publishers.dispatcher import OutboundDispatcher, get_dispatcher
from tests.helpers import seed_catalog


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'fulfillment.db'}", echo=False, lock_timeout_ms=30000)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_catalog(session)
    yield session
    session.close()


class RecordingDispatcher(OutboundDispatcher):
    """Dispatcher that also remembers every submitted message."""

    def __init__(self) -> None:
        super().__init__(maxsize=100, name="test-dispatcher")
        self.submitted = []

    def submit(self, event_type, data):
        self.submitted.append((event_type, data))
        return super().submit(event_type, data)


@pytest.fixture
def dispatcher():
    dispatcher = RecordingDispatcher()
    yield dispatcher
    dispatcher.stop()


@pytest.fixture
def client(db, session_factory, dispatcher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()
