"""
Test configuration and fixtures for the LinkHub API.
This centralizes all test setup, making individual tests clean.

Every test gets a fresh in-memory store and blob storage; the FastAPI
dependencies are overridden so routes use them too.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from main import app
from linkhub_app.blob.strategies import InMemoryBlobStorage
from linkhub_app.dependencies import get_blob_storage, get_store
from linkhub_app.services.admin_service import AdminService
from linkhub_app.services.auth_service import AuthService
from linkhub_app.services.link_service import LinkService
from linkhub_app.services.profile_service import ProfileService
from linkhub_app.store.strategies import InMemoryKeyValueStore


class FakeClock:
    """Manually advanced seconds source for TTL tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
def clock():
    return FakeClock()


@pytest.fixture(scope="function")
def store(clock):
    """Fresh in-memory store for each test"""
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture(scope="function")
def blob_storage():
    return InMemoryBlobStorage()


@pytest.fixture
def auth_service(store):
    return AuthService(store)


@pytest.fixture
def link_service(store):
    return LinkService(store)


@pytest.fixture
def profile_service(store, blob_storage):
    return ProfileService(store, blob_storage)


@pytest.fixture
def admin_service(store, profile_service):
    return AdminService(store, profile_service)


@pytest.fixture
def alice(auth_service):
    """A registered user"""
    return asyncio.run(auth_service.register("alice@example.com", "alice", "correctpass", "Alice"))


@pytest.fixture(scope="function")
def client(store, blob_storage):
    """
    Create a test client with store and blob dependencies overridden.
    This is the main fixture that route tests will use.
    """
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage

    # Create test client (runs startup, which bootstraps the admin account)
    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
