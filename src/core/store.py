"""Record store protocol: a per-owner key-value store of task lists."""

import copy
import logging
from typing import Any, Protocol

from src.core.config import settings


logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Persistence interface for per-owner task lists.

    Keys are opaque to callers. A save replaces the whole list for the key;
    there is no merge logic and the last write wins.
    """

    async def load(self, owner_key: str) -> list[dict[str, Any]]:
        """Return the persisted task list for the key, or an empty list."""
        ...

    async def save(self, owner_key: str, records: list[dict[str, Any]]) -> None:
        """Persist the full task list for the key, all or nothing."""
        ...


def owner_key(*, org_id: str, username: str) -> str:
    """Derive the store key for a user's task list within an organization."""
    return f"{settings.store_key_prefix}{org_id}_{username}"


class MemoryRecordStore:
    """Dict-backed record store used for local runs and tests."""

    def __init__(self) -> None:
        self._data: dict[str, list[dict[str, Any]]] = {}

    async def load(self, owner_key: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._data.get(owner_key, []))

    async def save(self, owner_key: str, records: list[dict[str, Any]]) -> None:
        self._data[owner_key] = copy.deepcopy(records)
        logger.debug("Saved records", extra={"owner_key": owner_key, "count": len(records)})

    def keys(self) -> list[str]:
        return list(self._data)


_default_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    """Return the configured record store (built once per process)."""
    global _default_store  # noqa: PLW0603
    if _default_store is None:
        if settings.store_backend == "memory":
            _default_store = MemoryRecordStore()
        elif settings.store_backend == "http":
            from src.core.http_store import HttpRecordStore

            _default_store = HttpRecordStore(
                base_url=settings.require_credential("remote_store_url", "Remote record store"),
                api_key=settings.remote_store_api_key,
            )
        else:
            from src.core.db_client import SQLiteRecordStore

            _default_store = SQLiteRecordStore()
        logger.info("Record store selected", extra={"backend": settings.store_backend})
    return _default_store


def set_record_store(store: RecordStore | None) -> None:
    """Override the process-wide record store (None resets to configured default)."""
    global _default_store  # noqa: PLW0603
    _default_store = store
