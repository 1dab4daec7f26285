"""Shared test fixtures.

Provides in-memory stores, a fake image host, service instances, and a
FastAPI ``TestClient`` wired to them through ``dependency_overrides``.
"""

import os
import tempfile
from collections.abc import Generator

# Must be set before portal settings are first loaded
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="portal-uploads-"))
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")

import pytest
from fastapi.testclient import TestClient

from portal.core.security import get_access_codec, get_refresh_codec
from portal.services.profile_service import ProfileService
from portal.services.session_service import SessionService
from tests.helpers.fakes import FakeImageHost, InMemoryJobStore, InMemoryUserStore


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def job_store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture()
def image_host() -> FakeImageHost:
    return FakeImageHost()


@pytest.fixture()
def sessions(user_store: InMemoryUserStore, image_host: FakeImageHost) -> SessionService:
    return SessionService(user_store, get_access_codec(), get_refresh_codec(), image_host=image_host)


@pytest.fixture()
def profiles(user_store: InMemoryUserStore, job_store: InMemoryJobStore, image_host: FakeImageHost) -> ProfileService:
    return ProfileService(user_store, job_store, image_host=image_host)


@pytest.fixture()
def registered_user(sessions: SessionService) -> dict:
    """A registered user (alice / a@x.com / p1)."""
    return sessions.register({
        "fullname": "Alice Liddell",
        "email": "a@x.com",
        "username": "alice",
        "password": "p1",
        "mobile_number": "5550100",
        "birth_date": "2001-04-02",
    })


@pytest.fixture()
def test_client(
    user_store: InMemoryUserStore, job_store: InMemoryJobStore, image_host: FakeImageHost
) -> Generator[TestClient, None, None]:
    """TestClient over http; secure cookies are therefore not sent back."""
    from portal.api.deps import get_image_host, get_job_store, get_user_store
    from portal.main import app

    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_job_store] = lambda: job_store
    app.dependency_overrides[get_image_host] = lambda: image_host
    # Lifespan is not entered, so no MongoDB connection is attempted
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def https_client(test_client: TestClient) -> TestClient:
    """Same app over https so the secure auth cookies round-trip."""
    return TestClient(test_client.app, base_url="https://testserver")
