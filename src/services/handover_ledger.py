"""Lookups over a task's append-only handover ledger.

All searches are linear scans from the end of the ledger, since insertion
order is chronological order and only the latest matching record is live.
"""

from collections.abc import Callable

from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task


def _find_last(task: Task, predicate: Callable[[HandoverRecord], bool]) -> int | None:
    for index in range(len(task.handovers) - 1, -1, -1):
        if predicate(task.handovers[index]):
            return index
    return None


def append_record(task: Task, record: HandoverRecord) -> Task:
    """Return a copy of task with record appended to its ledger."""
    return task.model_copy(update={"handovers": [*task.handovers, record]})


def replace_record(task: Task, index: int, record: HandoverRecord) -> Task:
    """Return a copy of task with the ledger entry at index replaced."""
    handovers = list(task.handovers)
    handovers[index] = record
    return task.model_copy(update={"handovers": handovers})


def find_last_inbound(task: Task, user: str) -> int | None:
    """Index of the latest record addressed to user."""
    return _find_last(task, lambda record: record.to_user == user)


def find_last_outbound(task: Task, user: str) -> int | None:
    """Index of the latest record sent by user."""
    return _find_last(task, lambda record: record.from_user == user)


def last_inbound(task: Task, user: str) -> HandoverRecord | None:
    index = find_last_inbound(task, user)
    return None if index is None else task.handovers[index]


def last_outbound(task: Task, user: str) -> HandoverRecord | None:
    index = find_last_outbound(task, user)
    return None if index is None else task.handovers[index]


def find_unresolved_counterpart(task: Task, *, from_user: str, to_user: str) -> int | None:
    """Index of the latest PENDING record between from_user and to_user with no response yet."""
    return _find_last(
        task,
        lambda record: (
            record.from_user == from_user
            and record.to_user == to_user
            and record.status == HandoverStatus.PENDING
            and record.response_timestamp is None
        ),
    )


def find_matching_record(task: Task, record: HandoverRecord) -> int | None:
    """Index of the entry describing the same transfer attempt as record."""
    return _find_last(task, record.same_identity)


def involves_user(task: Task, user: str) -> bool:
    """True if user sent or received any handover of this task."""
    return any(record.from_user == user or record.to_user == user for record in task.handovers)


def find_task(tasks: list[Task], task_id: str) -> int | None:
    """Index of the task with task_id in an owner's list."""
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    return None
