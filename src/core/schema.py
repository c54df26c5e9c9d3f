"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all tables in the schema
TABLES = ["task_stores"]

TABLE_SCHEMAS: dict[str, str] = {
    "task_stores": """CREATE TABLE IF NOT EXISTS task_stores (
        owner_key TEXT PRIMARY KEY,
        records TEXT NOT NULL DEFAULT '[]',
        created TEXT NOT NULL DEFAULT (datetime('now')),
        updated TEXT NOT NULL DEFAULT (datetime('now'))
    )""",
}


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)
    for table in TABLES:
        await conn.execute(TABLE_SCHEMAS[table])
    await conn.commit()
    logger.info("Schema initialized", extra={"tables": TABLES, "db_path": str(db_client.get_db_path(db_path))})
