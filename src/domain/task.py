"""Task domain models and enums."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.handover import HandoverRecord


class TaskStatus(StrEnum):
    """Task lifecycle state, independent per owner copy."""

    PROPOSED = "PROPOSED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DIVESTED = "DIVESTED"  # Soft-deleted


class Task(BaseModel):
    """Task record as stored in a user's task list.

    Only the fields the handover flow reads are declared. Everything else the
    dashboard stores (title, scores, tags, attachments, ...) is kept as extra
    data and written back untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., description="Task ID, shared by every owner's copy")
    status: TaskStatus = Field(default=TaskStatus.PROPOSED, description="Lifecycle state of this copy")
    created_at: int | None = Field(default=None, description="Creation time (epoch ms)")
    completed_at: int | None = Field(default=None, description="Completion time (epoch ms)")
    handovers: list[HandoverRecord] = Field(default_factory=list, description="Transfer ledger, oldest first")

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
