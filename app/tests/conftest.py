import os
import tempfile

# Point the application at a throwaway SQLite file before it is imported.
# A file (not :memory:) gives every thread its own connection, which the
# concurrency tests rely on.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="event-registration-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.database.db import Base, SessionLocal, engine, get_db
from app.main import app

TestingSessionLocal = SessionLocal


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Route the registration lock through fakeredis."""
    monkeypatch.setattr("app.services.registrations.get_redis_client", lambda: fake_redis)
    # Generous wait so contended tests never time out on a slow machine
    monkeypatch.setattr("app.services.registrations.EVENT_LOCK_BLOCKING_TIMEOUT", 30)
    return fake_redis
