"""SQLite-backed record store with cached aiosqlite connections."""

import asyncio
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import settings
from src.core.errors import DatabaseError, RecordNotFoundError


logger = logging.getLogger(__name__)

__all__ = [
    "DatabaseError",
    "RecordNotFoundError",
    "SQLiteRecordStore",
    "close_connection",
    "get_connection",
    "get_db_path",
    "init_db",
]


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


def _cache_key(db_path: str | None) -> tuple[int, int, str]:
    return (threading.get_ident(), id(asyncio.get_running_loop()), str(get_db_path(db_path)))


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path = get_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info("Created new SQLite connection", extra={"db_path": str(path)})
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key not in _db_connections:
        return

    try:
        async with _db_lock:
            conn = _db_connections.pop(cache_key, None)
            if conn is not None:
                await conn.close()
                logger.info("Closed SQLite connection", extra={"db_path": cache_key[2]})
    except Exception as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e)})


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from src.core import schema

    await schema.init_db(db_path=db_path)


class SQLiteRecordStore:
    """Record store keeping one JSON-encoded task list per owner key."""

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path

    async def load(self, owner_key: str) -> list[dict[str, Any]]:
        """Return the task list stored under owner_key, or [] if none."""
        try:
            conn = await get_connection(db_path=self._db_path)
            cursor = await conn.execute("SELECT records FROM task_stores WHERE owner_key = ?", (owner_key,))
            row = await cursor.fetchone()
        except Exception as e:
            logger.error("load_records_failed", extra={"owner_key": owner_key, "error": str(e)})
            msg = f"Failed to load records for {owner_key}: {e}"
            raise DatabaseError(msg) from e

        if row is None:
            return []

        try:
            records = json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.error("load_records_corrupt", extra={"owner_key": owner_key, "error": str(e)})
            msg = f"Stored records for {owner_key} are not valid JSON"
            raise DatabaseError(msg) from e

        if not isinstance(records, list):
            msg = f"Stored records for {owner_key} must be a list, got {type(records).__name__}"
            raise DatabaseError(msg)

        logger.debug("Loaded records", extra={"owner_key": owner_key, "count": len(records)})
        return records

    async def save(self, owner_key: str, records: list[dict[str, Any]]) -> None:
        """Replace the task list for owner_key in a single transaction."""
        try:
            payload = json.dumps(records, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            msg = f"Records for {owner_key} are not JSON serializable: {e}"
            raise DatabaseError(msg) from e

        conn = None
        try:
            conn = await get_connection(db_path=self._db_path)
            await conn.execute(
                """INSERT INTO task_stores (owner_key, records, updated) VALUES (?, ?, ?)
                ON CONFLICT(owner_key) DO UPDATE SET records = excluded.records, updated = excluded.updated""",
                (owner_key, payload, datetime.now().isoformat()),
            )
            await conn.commit()
        except Exception as e:
            if conn is not None:
                await conn.rollback()
            logger.error("save_records_failed", extra={"owner_key": owner_key, "error": str(e)})
            msg = f"Failed to save records for {owner_key}: {e}"
            raise DatabaseError(msg) from e

        logger.info("Saved records", extra={"owner_key": owner_key, "count": len(records)})
