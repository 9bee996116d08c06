"""
Shared fixtures: fake clock, stub geocoding providers, in-memory database
and a TestClient wired through dependency overrides.
"""
import os

# Must be set before config.settings is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEOCODE_BATCH_DELAY_SECONDS", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from plantswap.cache import TTLCacheStore
from plantswap.db import get_db
from plantswap.dependencies import get_api_cache, get_geocoder
from plantswap.geo import Coordinate, Geocoder, GeocodingProvider
from plantswap.main import app
from plantswap.models import Base


class FakeClock:
    """Manually advanced clock in epoch milliseconds."""

    def __init__(self, start: float = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class StubProvider(GeocodingProvider):
    """
    Provider answering from a dict; optionally raises instead.

    Records every zip it was asked for in calls.
    """

    def __init__(self, name="stub", coordinates=None, error=None):
        self._name = name
        self._coordinates = coordinates or {}
        self.error = error
        self.calls = []

    @property
    def name(self):
        return self._name

    def resolve(self, zip_code):
        self.calls.append(zip_code)
        if self.error is not None:
            raise self.error
        return self._coordinates.get(zip_code)


# =============================================================================
# Known locations used across tests
# =============================================================================

NYC = Coordinate(lat=40.75, lng=-74.00)             # 10001
NEWARK = Coordinate(lat=40.7357, lng=-74.1724)      # 07102, ~9 miles from NYC
PHILADELPHIA = Coordinate(lat=39.9526, lng=-75.1652)  # 19103, ~80 miles from NYC
BOSTON = Coordinate(lat=42.3601, lng=-71.0589)      # 02108, ~190 miles from NYC

KNOWN_ZIPS = {
    "10001": NYC,
    "07102": NEWARK,
    "19103": PHILADELPHIA,
    "02108": BOSTON,
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_provider():
    return StubProvider(coordinates=dict(KNOWN_ZIPS))


@pytest.fixture
def geocoder(stub_provider):
    return Geocoder(providers=[stub_provider])


@pytest.fixture
def api_cache():
    return TTLCacheStore(name="api")


@pytest.fixture
def db_session():
    """Fresh in-memory database shared across threads for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session, api_cache, geocoder):
    """TestClient with database, cache and geocoder overridden."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_api_cache] = lambda: api_cache
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
