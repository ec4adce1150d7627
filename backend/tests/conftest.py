"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Generator

# Settings are read at import time; point them at an in-memory database first
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ.pop("SEED_ROOT_EMAIL", None)
os.environ.pop("SEED_ROOT_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from quizhub.core.dependencies import Services, build_dispatcher, build_services  # noqa: E402
from quizhub.db.base import Base  # noqa: E402
from quizhub.db.engine import engine  # noqa: E402
from quizhub.db.session import SessionLocal, get_db  # noqa: E402
from quizhub.events.dispatcher import EventDispatcher  # noqa: E402
from quizhub.main import app  # noqa: E402
from quizhub.models.user import User  # noqa: E402
from tests.helpers.seed import create_test_root, create_test_user  # noqa: E402


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test; dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    """Test client sharing the test session with the app."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return build_dispatcher()


@pytest.fixture
def services(db, dispatcher) -> Services:
    return build_services(db, dispatcher)


@pytest.fixture
def root_user(db) -> User:
    return create_test_root(db)


@pytest.fixture
def test_user(db) -> User:
    """A regular user."""
    return create_test_user(db, name="Alice")


@pytest.fixture
def other_user(db) -> User:
    """A second regular user."""
    return create_test_user(db, name="Bob")
