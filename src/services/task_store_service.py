"""Typed access to per-user task lists on top of a RecordStore."""

import logging

from pydantic import ValidationError

from src.core.errors import DatabaseError
from src.core.logging import span
from src.core.store import RecordStore, owner_key
from src.domain.task import Task


logger = logging.getLogger(__name__)


async def load_tasks(*, store: RecordStore, org_id: str, username: str) -> list[Task]:
    """Load a user's task list as models.

    Raises:
        DatabaseError: If the store fails or holds records that do not parse
    """
    with span("task_store.load_tasks"):
        key = owner_key(org_id=org_id, username=username)
        records = await store.load(key)
        try:
            return [Task.model_validate(record) for record in records]
        except ValidationError as e:
            logger.error("task_records_invalid", extra={"owner_key": key, "error": str(e)})
            msg = f"Stored tasks for {username} in {org_id} are malformed: {e}"
            raise DatabaseError(msg) from e


async def save_tasks(*, store: RecordStore, org_id: str, username: str, tasks: list[Task]) -> None:
    """Persist a user's full task list, replacing what was stored."""
    with span("task_store.save_tasks"):
        key = owner_key(org_id=org_id, username=username)
        await store.save(key, [task.to_record() for task in tasks])
