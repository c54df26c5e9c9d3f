"""Pytest configuration and fixtures for integration tests."""

from collections.abc import AsyncGenerator

import pytest

from src.core import db_client
from src.core.db_client import SQLiteRecordStore


@pytest.fixture
async def sqlite_store(tmp_path) -> AsyncGenerator[SQLiteRecordStore]:
    """SQLite record store on a fresh database file, closed after the test."""
    db_path = str(tmp_path / "integration.db")
    await db_client.init_db(db_path=db_path)
    yield SQLiteRecordStore(db_path=db_path)
    await db_client.close_connection(db_path=db_path)
