"""
Shared fixtures: a throwaway SQLite database per test, fake AI and geocoding
backends, and an HTTP client bound to the app
"""

import os

# Must be set before wander modules read settings
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("ENABLE_RATE_LIMITING", "false")
os.environ.setdefault("DB_URL", "sqlite:///./wander-test.db")

from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from wander.core.ai import get_ai_client
from wander.core.geocoding import GeocodeResult, get_geocoder
from wander.core.rate_limit import limiter
from wander.core.security import create_access_token
from wander.core.settings import Settings, get_settings
from wander.db.models import User
from wander.db.session import DatabaseManager
from wander.main import app


class FakeAIClient:
    """Returns queued replies and records every prompt it was sent"""

    def __init__(self):
        self.configured = True
        self.replies: List[str] = []
        self.calls: List[dict] = []

    async def complete(self, messages, temperature=None, max_tokens=None) -> str:
        self.calls.append({"messages": messages, "temperature": temperature})
        return self.replies.pop(0) if self.replies else ""


class FakeGeocoder:
    """Resolves only the names it was given; everything else misses"""

    def __init__(self):
        self.configured = True
        self.places: Dict[str, GeocodeResult] = {}
        self.calls: List[List[str]] = []

    def add(self, name: str, latitude: float, longitude: float, place_id: Optional[str] = None):
        self.places[name] = GeocodeResult(
            latitude=latitude,
            longitude=longitude,
            place_name=f"{name}, India",
            place_id=place_id,
        )

    async def geocode_many(self, names):
        self.calls.append(list(names))
        return [self.places.get(name) for name in names]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DB_URL=f"sqlite:///{tmp_path / 'wander.db'}",
        JWT_SECRET="test-secret",
        JWT_AUDIENCE="authenticated",
        SERVICE_ROLE_KEY="service-key",
        AI_API_KEY="",
        MAPBOX_TOKEN="",
        YOUTUBE_API_KEY="yt-key",
        APP_URL="https://wander.test",
        ENABLE_RATE_LIMITING=False,
        LOG_FILE="",
    )


@pytest.fixture
async def db_manager(settings):
    manager = DatabaseManager(settings)
    await manager.initialize()
    await manager.init_db()
    yield manager
    await manager.close()


@pytest.fixture
async def session(db_manager):
    async with db_manager.get_session() as session:
        yield session


@pytest.fixture
def fake_ai() -> FakeAIClient:
    return FakeAIClient()


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
async def client(settings, db_manager, fake_ai, fake_geocoder):
    limiter.enabled = False
    app.state.db = db_manager
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    app.dependency_overrides[get_geocoder] = lambda: fake_geocoder
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _seed_user(db_manager, username: str) -> UUID:
    user_id = uuid4()
    async with db_manager.get_session() as session:
        session.add(User(id=user_id, email=f"{username}@example.com", username=username))
        await session.commit()
    return user_id


@pytest.fixture
async def owner_id(db_manager) -> UUID:
    return await _seed_user(db_manager, "owner")


@pytest.fixture
async def other_id(db_manager) -> UUID:
    return await _seed_user(db_manager, "stranger")


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id: UUID) -> Dict[str, str]:
        token = create_access_token(user_id, settings, email="traveler@example.com")
        return {"Authorization": f"Bearer {token}"}
    return _headers
