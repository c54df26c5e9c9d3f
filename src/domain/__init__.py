"""Domain models and DTOs."""

from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task, TaskStatus


__all__ = [
    "HandoverRecord",
    "HandoverStatus",
    "Task",
    "TaskStatus",
]
