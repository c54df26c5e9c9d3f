"""Pytest configuration and shared fixtures."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from src.core.store import MemoryRecordStore, RecordStore, owner_key
from src.domain.task import Task
from src.services.task_store_service import load_tasks
from tests.helpers import ORG_ID


@pytest.fixture
def org_id() -> str:
    return ORG_ID


@pytest.fixture
def memory_store() -> MemoryRecordStore:
    """Provides a fresh in-memory record store for each test."""
    return MemoryRecordStore()


@pytest.fixture
def seed_tasks(memory_store: MemoryRecordStore) -> Callable[..., Awaitable[None]]:
    """Write raw task records straight into a user's list.

    Usage:
        await seed_tasks("alice", make_task("t1"), make_task("t2"))
    """

    async def _seed(username: str, *records: dict[str, Any], store: RecordStore | None = None) -> None:
        target = store or memory_store
        await target.save(owner_key(org_id=ORG_ID, username=username), list(records))

    return _seed


@pytest.fixture
def read_tasks(memory_store: MemoryRecordStore) -> Callable[..., Awaitable[list[Task]]]:
    """Read a user's persisted list back as models."""

    async def _read(username: str, store: RecordStore | None = None) -> list[Task]:
        return await load_tasks(store=store or memory_store, org_id=ORG_ID, username=username)

    return _read
