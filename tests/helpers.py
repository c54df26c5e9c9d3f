"""Shared test data builders."""

from typing import Any


ORG_ID = "org1"


def make_task(task_id: str = "t1", **kwargs: Any) -> dict[str, Any]:
    """Build a persisted task record with dashboard fields the core does not read."""
    record = {
        "id": task_id,
        "originalInput": f"Input for {task_id}",
        "title": f"Task {task_id}",
        "description": "A test task",
        "impactScore": 7,
        "effortScore": 3,
        "strategicAdvice": "",
        "subTasks": [],
        "status": "IN_PROGRESS",
        "createdAt": 1_700_000_000_000,
        "tags": ["P1"],
    }
    record.update(kwargs)
    return record
