"""Pytest fixtures and configuration for sincewhen tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import patch

from sincewhen.database.database import Base, get_db, init_db
from sincewhen.database.models import TimerDB
from sincewhen.database.group_repository import GroupRepository
from sincewhen.database.settings_repository import SettingsRepository
from sincewhen.database.timer_repository import TimerRepository
from sincewhen.database.user_repository import UserRepository


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite engine with the schema and settings created fresh for each test.

    Foreign keys are switched on by the connect listener in sincewhen.database.database.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    init_db(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine):
    """Create a database session for testing."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_repository(db_session: Session):
    return UserRepository(db_session)


@pytest.fixture
def timer_repository(db_session: Session):
    return TimerRepository(db_session)


@pytest.fixture
def group_repository(db_session: Session):
    return GroupRepository(db_session)


@pytest.fixture
def settings_repository(db_session: Session):
    return SettingsRepository(db_session)


@pytest.fixture
def test_user(user_repository):
    """The user most tests act as."""
    return user_repository.get_or_create("test@example.com")


@pytest.fixture
def other_user(user_repository):
    """A second user for ownership checks."""
    return user_repository.get_or_create("other@example.com")


@pytest.fixture
def set_epoch(db_session: Session):
    """Return a helper that moves a timer's epoch (by slug) to a given Unix time."""
    def _set_epoch(slug: str, epoch: int) -> None:
        db_session.query(TimerDB).filter(TimerDB.slug == slug).update(
            {TimerDB.epoch: epoch}, synchronize_session=False
        )
        db_session.commit()
    return _set_epoch


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from sincewhen.api.app import app
    from sincewhen.auth.dependencies import get_current_user

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    # The schema already lives in the test engine; skip startup init against the real URL.
    with patch("sincewhen.api.app.init_db"):
        with TestClient(app) as client:
            yield client

    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db_session: Session):
    """Test client with the database override but no authenticated user."""
    from sincewhen.api.app import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with patch("sincewhen.api.app.init_db"):
        with TestClient(app) as client:
            yield client

    app.dependency_overrides.clear()
