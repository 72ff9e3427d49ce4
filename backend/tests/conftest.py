"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from api.helpers import (
    get_calendar_client,
    get_espn_client,
    get_oauth_client,
    get_preference_store,
    get_ticketmaster_client,
    get_weather_client,
)
from database import Base
from main import app
from services.preference_store import DatabaseBackend, JsonFileBackend, PreferenceStore
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import TEST_PASSWORD, espn_catalog  # noqa: F401
from tests.fixtures.mocks import (
    MockCalendarClient,
    MockEspnClient,
    MockOAuthClient,
    MockTicketmasterClient,
    MockWeatherClient,
)



@pytest.fixture(name="store_path")
def store_path_fixture(tmp_path):
    """Path of the JSON preferences file (not created yet)."""
    return tmp_path / "data" / "user-data.json"


@pytest.fixture(name="file_store")
def file_store_fixture(store_path):
    """Preference store backed only by the JSON file tier."""
    return PreferenceStore([JsonFileBackend(store_path, TEST_PASSWORD)])


@pytest.fixture(name="session_factory")
def session_factory_fixture():
    """Sessionmaker bound to an in-memory SQLite database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(name="hosted_store")
def hosted_store_fixture(session_factory, store_path):
    """Preference store with the hosted tier in front of the JSON file tier."""
    return PreferenceStore(
        [
            DatabaseBackend(session_factory, TEST_PASSWORD),
            JsonFileBackend(store_path, TEST_PASSWORD),
        ]
    )


@pytest.fixture(name="espn")
def espn_fixture():
    return MockEspnClient()


@pytest.fixture(name="ticketmaster")
def ticketmaster_fixture():
    return MockTicketmasterClient()


@pytest.fixture(name="calendar_client")
def calendar_client_fixture():
    return MockCalendarClient()


@pytest.fixture(name="oauth")
def oauth_fixture():
    return MockOAuthClient()


@pytest.fixture(name="weather")
def weather_fixture():
    return MockWeatherClient()


@pytest.fixture(name="client")
def client_fixture(file_store, espn, ticketmaster, calendar_client, oauth, weather):
    """Create a test client with a temporary preference file and mock upstreams."""
    app.dependency_overrides[get_preference_store] = lambda: file_store
    app.dependency_overrides[get_espn_client] = lambda: espn
    app.dependency_overrides[get_ticketmaster_client] = lambda: ticketmaster
    app.dependency_overrides[get_calendar_client] = lambda: calendar_client
    app.dependency_overrides[get_oauth_client] = lambda: oauth
    app.dependency_overrides[get_weather_client] = lambda: weather
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="hosted_client")
def hosted_client_fixture(hosted_store):
    """Create a test client whose preference store has a hosted tier."""
    app.dependency_overrides[get_preference_store] = lambda: hosted_store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
