"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator

# Set test environment before importing the app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bmt.config import Settings
from bmt.db.models import Base

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app_settings() -> Settings:
    """Print settings used by the test app (PDF mode, no central queue)."""
    return Settings(
        _env_file=None,
        database_url=SQLALCHEMY_TEST_DATABASE_URL,
        print_mode="",
        central_mode=False,
        printer=None,
        direct_print=False,
        device_path="/dev/null",
        label_media="Custom.189x72",
        orientation="",
        print_fit=True,
        tcp_print_timeout_ms=500,
        label_timezone="America/New_York",
    )


@pytest.fixture(scope="function")
def client(db: Session, app_settings: Settings) -> Generator[TestClient, None, None]:
    """Create a test client with database and settings overrides."""
    # Import here to ensure env vars are set
    from bmt.config import get_settings
    from bmt.dependencies import get_db
    from bmt.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: app_settings
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_session() -> dict:
    """Session as stored by the session store."""
    return {
        "id": "session-123",
        "timestamp": "2025-03-07T14:05:09.000Z",
        "amount_oz": 1.0,
        "notes": "left side",
        "use_by_fridge": "2025-03-11T14:05:09.000Z",
        "use_by_frozen": "2025-09-07T14:05:09.000Z",
    }
