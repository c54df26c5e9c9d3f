"""Inbox/outbox views over a user's task list.

Each view looks only at the latest record the user received (inbox) or sent
(outbox) for a task. Nothing here mutates tasks.
"""

from pydantic import BaseModel, Field

from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task, TaskStatus
from src.services.handover_ledger import involves_user, last_inbound, last_outbound


class CollabViews(BaseModel):
    """The four collaboration view-sets for one user."""

    inbox_pending: list[Task] = Field(default_factory=list)
    inbox_history: list[Task] = Field(default_factory=list)
    outbox_active: list[Task] = Field(default_factory=list)
    outbox_history: list[Task] = Field(default_factory=list)
    unread_count: int = 0


def _created_sort_key(task: Task, record: HandoverRecord) -> int:
    return task.created_at if task.created_at is not None else record.timestamp


def _sorted_by_created(pairs: list[tuple[Task, HandoverRecord]]) -> list[Task]:
    return [task for task, _ in sorted(pairs, key=lambda pair: _created_sort_key(*pair), reverse=True)]


def _sorted_by_response(pairs: list[tuple[Task, HandoverRecord]]) -> list[Task]:
    return [task for task, _ in sorted(pairs, key=lambda pair: pair[1].response_timestamp or 0, reverse=True)]


def _inbound_pairs(tasks: list[Task], user: str) -> list[tuple[Task, HandoverRecord]]:
    pairs = []
    for task in tasks:
        record = last_inbound(task, user)
        if record is not None:
            pairs.append((task, record))
    return pairs


def _outbound_pairs(tasks: list[Task], user: str) -> list[tuple[Task, HandoverRecord]]:
    pairs = []
    for task in tasks:
        record = last_outbound(task, user)
        if record is not None:
            pairs.append((task, record))
    return pairs


def inbox_pending(tasks: list[Task], user: str) -> list[Task]:
    """Tasks whose latest handover to user still awaits their answer, newest first."""
    return _sorted_by_created(
        [(task, record) for task, record in _inbound_pairs(tasks, user) if record.status == HandoverStatus.PENDING]
    )


def inbox_history(tasks: list[Task], user: str) -> list[Task]:
    """Tasks user has answered and not archived, most recently answered first."""
    return _sorted_by_response(
        [
            (task, record)
            for task, record in _inbound_pairs(tasks, user)
            if record.status != HandoverStatus.PENDING and not record.receiver_archived
        ]
    )


def outbox_active(tasks: list[Task], user: str) -> list[Task]:
    """Tasks user sent that are unanswered, or answered but not yet acknowledged."""
    return _sorted_by_created(
        [
            (task, record)
            for task, record in _outbound_pairs(tasks, user)
            if record.status == HandoverStatus.PENDING or not record.sender_archived
        ]
    )


def outbox_history(tasks: list[Task], user: str) -> list[Task]:
    """Answered tasks user sent and has acknowledged, most recently answered first."""
    return _sorted_by_response(
        [
            (task, record)
            for task, record in _outbound_pairs(tasks, user)
            if record.status != HandoverStatus.PENDING and record.sender_archived
        ]
    )


def count_unread_inbox(tasks: list[Task], user: str, *, last_seen: int) -> int:
    """Count tasks with a pending handover to user created after last_seen (epoch ms)."""
    return sum(
        1
        for task in tasks
        if any(
            record.to_user == user and record.status == HandoverStatus.PENDING and record.timestamp > last_seen
            for record in task.handovers
        )
    )


def collab_tasks(tasks: list[Task], user: str) -> list[Task]:
    """Tasks user has sent or received, excluding divested ones."""
    return [task for task in tasks if involves_user(task, user) and task.status != TaskStatus.DIVESTED]


def build_collab_views(tasks: list[Task], user: str, *, last_seen: int = 0) -> CollabViews:
    """Compute every collaboration view for user, ignoring divested tasks."""
    tasks = collab_tasks(tasks, user)
    return CollabViews(
        inbox_pending=inbox_pending(tasks, user),
        inbox_history=inbox_history(tasks, user),
        outbox_active=outbox_active(tasks, user),
        outbox_history=outbox_history(tasks, user),
        unread_count=count_unread_inbox(tasks, user, last_seen=last_seen),
    )
