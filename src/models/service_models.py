"""Pydantic models for the HTTP interface.

These models provide type safety at the API boundary, converting JSON request
bodies into typed objects with validation.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.domain.handover import HandoverStatus
from src.domain.task import Task


class CompleteTaskRequest(BaseModel):
    """Complete a task, optionally handing it to a colleague."""

    task_id: str
    from_user: str
    to_user: str | None = None
    remark: str = ""


class RespondRequest(BaseModel):
    """Receiver's answer to a handover."""

    receiver: str
    task_id: str
    status: HandoverStatus
    response: str = ""


class ArchiveRequest(BaseModel):
    """Archive the latest handover of one task for one side."""

    username: str
    task_id: str


class ArchiveAllRequest(BaseModel):
    """Archive every resolved handover for one side."""

    username: str


class RefreshOutboxRequest(BaseModel):
    """Pull missed responses into a sender's outbox."""

    sender: str


class TaskListResponse(BaseModel):
    """The acting user's full task list after an operation."""

    tasks: list[dict[str, Any]]

    @classmethod
    def from_tasks(cls, tasks: list[Task]) -> "TaskListResponse":
        return cls(tasks=[task.to_record() for task in tasks])


class StoredRecords(BaseModel):
    """Raw task list held by the REST record store."""

    records: list[dict[str, Any]] = Field(default_factory=list)
