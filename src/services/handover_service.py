"""Handover service: completing tasks for review and reconciling both parties' copies.

The sender and the receiver each own an independent copy of a handed-over task.
Every operation here re-reads the acting user's list from the store, applies
its change, and saves the whole list back. A receiver's response is also
mirrored into the sender's list; that second write is best-effort and never
undoes the receiver-side change.
"""

import logging
from datetime import UTC, datetime

from src.core.config import settings
from src.core.errors import DatabaseError, ErrorCategory, InvalidTransitionError, RecordNotFoundError
from src.core.logging import log_with_user_context, span
from src.core.store import RecordStore
from src.domain.handover import HandoverRecord, HandoverStatus
from src.domain.task import Task, TaskStatus
from src.services import handover_ledger, handover_state_machine
from src.services.task_store_service import load_tasks, save_tasks


logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def _get_task(tasks: list[Task], task_id: str, username: str) -> int:
    index = handover_ledger.find_task(tasks, task_id)
    if index is None:
        msg = f"Task not found for {username}: {task_id}"
        raise RecordNotFoundError(msg)
    return index


async def complete_and_handover(
    *,
    store: RecordStore,
    org_id: str,
    task_id: str,
    from_user: str,
    to_user: str | None = None,
    remark: str = "",
) -> list[Task]:
    """Mark a task COMPLETED and optionally hand it to a colleague for review.

    Without a recipient the task is only marked completed for the sender. With
    one, a PENDING record is appended to the ledger and a copy of the task is
    pushed into the receiver's list with status IN_PROGRESS.

    Args:
        store: Record store holding every user's task list
        org_id: Organization the users belong to
        task_id: ID of the sender's task
        from_user: Username completing the task
        to_user: Username to hand the task to, if any
        remark: Message for the receiver (defaults to settings.default_handover_remark)

    Returns:
        The sender's updated task list

    Raises:
        InvalidTransitionError: If the task is DIVESTED or to_user is from_user
        RecordNotFoundError: If the sender has no task with task_id
        DatabaseError: If a store read or write fails
    """
    with span("handover_service.complete_and_handover"):
        if to_user is not None and to_user == from_user:
            msg = f"Cannot hand over task {task_id} to yourself"
            raise InvalidTransitionError(msg)

        sender_tasks = await load_tasks(store=store, org_id=org_id, username=from_user)
        index = _get_task(sender_tasks, task_id, from_user)
        task = sender_tasks[index]

        if task.status == TaskStatus.DIVESTED:
            msg = f"Cannot complete: task {task_id} is {task.status}"
            raise InvalidTransitionError(msg)

        now = now_ms()
        completed = task.model_copy(update={"status": TaskStatus.COMPLETED, "completed_at": now})

        if to_user:
            record = HandoverRecord(
                from_user=from_user,
                to_user=to_user,
                remark=remark or settings.default_handover_remark,
                timestamp=now,
                status=HandoverStatus.PENDING,
            )
            completed = handover_ledger.append_record(completed, record)

        sender_tasks[index] = completed

        if to_user:
            # Receiver first: if their write fails the sender's task is left as it was
            await _push_to_receiver(store=store, org_id=org_id, to_user=to_user, task=completed)

        await save_tasks(store=store, org_id=org_id, username=from_user, tasks=sender_tasks)

        log_with_user_context(
            logger,
            "info",
            "Task completed" if not to_user else "Task handed over",
            user_id=from_user,
            task_id=task_id,
            to_user=to_user,
            org_id=org_id,
        )
        return sender_tasks


async def _push_to_receiver(*, store: RecordStore, org_id: str, to_user: str, task: Task) -> None:
    """Insert or replace the receiver's copy of task."""
    receiver_tasks = await load_tasks(store=store, org_id=org_id, username=to_user)
    receiver_copy = task.model_copy(deep=True, update={"status": TaskStatus.IN_PROGRESS})

    existing = handover_ledger.find_task(receiver_tasks, task.id)
    if existing is None:
        receiver_tasks.insert(0, receiver_copy)
    else:
        receiver_tasks[existing] = receiver_copy

    await save_tasks(store=store, org_id=org_id, username=to_user, tasks=receiver_tasks)


async def respond_to_handover(
    *,
    store: RecordStore,
    org_id: str,
    receiver: str,
    task_id: str,
    status: HandoverStatus,
    response: str = "",
) -> list[Task]:
    """Resolve the latest handover of a task addressed to receiver.

    The receiver's copy is written first. The same resolution is then mirrored
    into the sender's copy, onto the latest record between the two users that
    has no response yet. A missing counterpart or a failed sender-side write is
    logged and otherwise ignored.

    Returns:
        The receiver's updated task list

    Raises:
        InvalidTransitionError: If status is not a resolution, there is no inbound
            handover, or the latest one was already answered
        RecordNotFoundError: If the receiver has no task with task_id
        DatabaseError: If the receiver-side read or write fails
    """
    with span("handover_service.respond_to_handover"):
        receiver_tasks = await load_tasks(store=store, org_id=org_id, username=receiver)
        task_index = _get_task(receiver_tasks, task_id, receiver)
        task = receiver_tasks[task_index]

        record_index = handover_ledger.find_last_inbound(task, receiver)
        if record_index is None:
            msg = f"Cannot respond: task {task_id} has no handover to {receiver}"
            raise InvalidTransitionError(msg)

        resolved = handover_state_machine.resolve(
            task.handovers[record_index],
            status=status,
            response=response,
            responded_at=now_ms(),
        )
        receiver_tasks[task_index] = handover_ledger.replace_record(task, record_index, resolved)
        await save_tasks(store=store, org_id=org_id, username=receiver, tasks=receiver_tasks)

        log_with_user_context(
            logger,
            "info",
            "Handover resolved",
            user_id=receiver,
            task_id=task_id,
            from_user=resolved.from_user,
            status=resolved.status.value,
        )

        await _mirror_to_sender(store=store, org_id=org_id, task_id=task_id, resolved=resolved)
        return receiver_tasks


async def _mirror_to_sender(*, store: RecordStore, org_id: str, task_id: str, resolved: HandoverRecord) -> bool:
    """Apply a receiver's resolution to the sender's copy. Returns True if written."""
    sender = resolved.from_user
    try:
        sender_tasks = await load_tasks(store=store, org_id=org_id, username=sender)
        task_index = handover_ledger.find_task(sender_tasks, task_id)
        record_index = (
            None
            if task_index is None
            else handover_ledger.find_unresolved_counterpart(
                sender_tasks[task_index], from_user=sender, to_user=resolved.to_user
            )
        )

        if task_index is None or record_index is None:
            logger.warning(
                "Handover counterpart not found on sender side",
                extra={
                    "task_id": task_id,
                    "sender": sender,
                    "receiver": resolved.to_user,
                    "category": ErrorCategory.MISSING_COUNTERPART.value,
                },
            )
            return False

        task = sender_tasks[task_index]
        mirrored = handover_state_machine.mirror_resolution(task.handovers[record_index], source=resolved)
        sender_tasks[task_index] = handover_ledger.replace_record(task, record_index, mirrored)
        await save_tasks(store=store, org_id=org_id, username=sender, tasks=sender_tasks)
    except InvalidTransitionError as e:
        logger.warning(
            "Handover counterpart on sender side cannot take the response",
            extra={
                "task_id": task_id,
                "sender": sender,
                "receiver": resolved.to_user,
                "error": str(e),
                "category": ErrorCategory.MISSING_COUNTERPART.value,
            },
        )
        return False
    except DatabaseError:
        logger.exception(
            "Failed to mirror handover response to sender",
            extra={"task_id": task_id, "sender": sender, "receiver": resolved.to_user},
        )
        return False

    logger.info(
        "Handover response mirrored to sender",
        extra={"task_id": task_id, "sender": sender, "receiver": resolved.to_user},
    )
    return True


async def _archive_latest(
    *,
    store: RecordStore,
    org_id: str,
    username: str,
    task_id: str,
    inbound: bool,
) -> list[Task]:
    tasks = await load_tasks(store=store, org_id=org_id, username=username)
    task_index = handover_ledger.find_task(tasks, task_id)
    if task_index is None:
        return tasks

    task = tasks[task_index]
    if inbound:
        record_index = handover_ledger.find_last_inbound(task, username)
        archive = handover_state_machine.mark_receiver_archived
    else:
        record_index = handover_ledger.find_last_outbound(task, username)
        archive = handover_state_machine.mark_sender_archived

    if record_index is None:
        return tasks

    current = task.handovers[record_index]
    archived = archive(current)
    if archived is current:
        return tasks

    tasks[task_index] = handover_ledger.replace_record(task, record_index, archived)
    await save_tasks(store=store, org_id=org_id, username=username, tasks=tasks)

    log_with_user_context(
        logger,
        "info",
        "Handover archived",
        user_id=username,
        task_id=task_id,
        side="receiver" if inbound else "sender",
    )
    return tasks


async def archive_for_receiver(*, store: RecordStore, org_id: str, receiver: str, task_id: str) -> list[Task]:
    """Hide the latest resolved handover of a task from the receiver's inbox history.

    No-op when the task has no inbound record, the record is still PENDING, or
    it is already archived.
    """
    with span("handover_service.archive_for_receiver"):
        return await _archive_latest(store=store, org_id=org_id, username=receiver, task_id=task_id, inbound=True)


async def archive_for_sender(*, store: RecordStore, org_id: str, sender: str, task_id: str) -> list[Task]:
    """Move the latest resolved handover sent by sender into their outbox history."""
    with span("handover_service.archive_for_sender"):
        return await _archive_latest(store=store, org_id=org_id, username=sender, task_id=task_id, inbound=False)


async def _archive_all_resolved(*, store: RecordStore, org_id: str, username: str, inbound: bool) -> list[Task]:
    tasks = await load_tasks(store=store, org_id=org_id, username=username)
    changed = 0

    for task_index, task in enumerate(tasks):
        handovers = []
        for record in task.handovers:
            if inbound and record.to_user == username:
                updated = handover_state_machine.mark_receiver_archived(record)
            elif not inbound and record.from_user == username:
                updated = handover_state_machine.mark_sender_archived(record)
            else:
                updated = record
            if updated is not record:
                changed += 1
            handovers.append(updated)
        tasks[task_index] = task.model_copy(update={"handovers": handovers})

    if changed:
        await save_tasks(store=store, org_id=org_id, username=username, tasks=tasks)

    log_with_user_context(
        logger,
        "info",
        "Resolved handovers archived",
        user_id=username,
        side="receiver" if inbound else "sender",
        archived_count=changed,
    )
    return tasks


async def archive_all_resolved_for_receiver(*, store: RecordStore, org_id: str, receiver: str) -> list[Task]:
    """Clear the receiver's inbox history. PENDING records stay actionable."""
    with span("handover_service.archive_all_resolved_for_receiver"):
        return await _archive_all_resolved(store=store, org_id=org_id, username=receiver, inbound=True)


async def archive_all_resolved_for_sender(*, store: RecordStore, org_id: str, sender: str) -> list[Task]:
    """Move every answered handover sent by sender into their outbox history."""
    with span("handover_service.archive_all_resolved_for_sender"):
        return await _archive_all_resolved(store=store, org_id=org_id, username=sender, inbound=False)


async def refresh_outbox(*, store: RecordStore, org_id: str, sender: str) -> list[Task]:
    """Pull missed responses from receivers into the sender's unanswered records.

    Repairs the gap left when a mirror write in respond_to_handover failed. For
    each record sent by sender that has no response yet, the receiver's copy of
    the same task is read; if the matching record there is resolved, its
    resolution is applied to the sender's record.

    Returns:
        The sender's task list, updated if anything was pulled
    """
    with span("handover_service.refresh_outbox"):
        sender_tasks = await load_tasks(store=store, org_id=org_id, username=sender)
        receiver_cache: dict[str, list[Task] | None] = {}
        pulled = 0

        for task_index, task in enumerate(sender_tasks):
            for record_index, record in enumerate(task.handovers):
                if (
                    record.from_user != sender
                    or record.status != HandoverStatus.PENDING
                    or record.response_timestamp is not None
                ):
                    continue

                if record.to_user not in receiver_cache:
                    try:
                        receiver_cache[record.to_user] = await load_tasks(
                            store=store, org_id=org_id, username=record.to_user
                        )
                    except DatabaseError:
                        logger.exception(
                            "Failed to read receiver tasks during outbox refresh",
                            extra={"sender": sender, "receiver": record.to_user},
                        )
                        receiver_cache[record.to_user] = None

                receiver_tasks = receiver_cache[record.to_user]
                if not receiver_tasks:
                    continue

                receiver_index = handover_ledger.find_task(receiver_tasks, task.id)
                if receiver_index is None:
                    continue
                receiver_task = receiver_tasks[receiver_index]
                match_index = handover_ledger.find_matching_record(receiver_task, record)
                if match_index is None:
                    continue

                source = receiver_task.handovers[match_index]
                if source.response_timestamp is None or not handover_state_machine.is_resolved(source):
                    continue

                mirrored = handover_state_machine.mirror_resolution(record, source=source)
                task = handover_ledger.replace_record(task, record_index, mirrored)
                sender_tasks[task_index] = task
                pulled += 1

        if pulled:
            await save_tasks(store=store, org_id=org_id, username=sender, tasks=sender_tasks)
            logger.info("Outbox refreshed", extra={"sender": sender, "pulled_count": pulled})

        return sender_tasks
