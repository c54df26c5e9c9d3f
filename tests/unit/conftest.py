"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.core.store import MemoryRecordStore, get_record_store
from src.main import app
from tests.unit.mocks import FlakyRecordStore


@pytest.fixture
def flaky_store() -> FlakyRecordStore:
    """Provides an in-memory store whose reads/writes can be made to fail per key."""
    return FlakyRecordStore()


@pytest.fixture
def api_client(memory_store: MemoryRecordStore) -> Generator[TestClient]:
    """FastAPI test client whose routes use the test's in-memory store."""
    app.dependency_overrides[get_record_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()
