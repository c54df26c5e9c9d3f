"""Pure state transition functions for handover records."""

from src.core.errors import InvalidTransitionError
from src.domain.handover import HandoverRecord, HandoverStatus


# Allowed transitions; resolved states are terminal
HANDOVER_TRANSITIONS: dict[HandoverStatus, set[HandoverStatus]] = {
    HandoverStatus.PENDING: {HandoverStatus.ACCEPTED, HandoverStatus.QUESTIONING, HandoverStatus.REJECTED},
    HandoverStatus.ACCEPTED: set(),
    HandoverStatus.QUESTIONING: set(),
    HandoverStatus.REJECTED: set(),
}

RESOLUTION_STATUSES: frozenset[HandoverStatus] = frozenset(HANDOVER_TRANSITIONS[HandoverStatus.PENDING])


def is_resolved(record: HandoverRecord) -> bool:
    """Return True once the receiver has answered the handover."""
    match record.status:
        case HandoverStatus.PENDING:
            return False
        case HandoverStatus.ACCEPTED | HandoverStatus.QUESTIONING | HandoverStatus.REJECTED:
            return True


def resolve(
    record: HandoverRecord,
    *,
    status: HandoverStatus,
    response: str,
    responded_at: int,
) -> HandoverRecord:
    """Return a copy of record resolved with the receiver's answer.

    Raises:
        InvalidTransitionError: If status is not a resolution status, or the record
            was already answered (response fields are write-once).
    """
    if status not in HANDOVER_TRANSITIONS[HandoverStatus.PENDING]:
        msg = f"Cannot resolve handover with status {status}: must be one of {sorted(RESOLUTION_STATUSES)}"
        raise InvalidTransitionError(msg)

    if record.response_timestamp is not None or status not in HANDOVER_TRANSITIONS[record.status]:
        msg = (
            f"Cannot resolve handover {record.from_user}->{record.to_user}: "
            f"already {record.status} at {record.response_timestamp}"
        )
        raise InvalidTransitionError(msg)

    return record.model_copy(
        update={
            "status": status,
            "response": response,
            "response_timestamp": responded_at,
        }
    )


def mirror_resolution(target: HandoverRecord, *, source: HandoverRecord) -> HandoverRecord:
    """Copy source's resolution fields onto target, leaving archive flags alone."""
    return resolve(
        target,
        status=source.status,
        response=source.response or "",
        responded_at=source.response_timestamp or 0,
    )


def mark_receiver_archived(record: HandoverRecord) -> HandoverRecord:
    """Hide a resolved record from the receiver's history. PENDING records are returned unchanged."""
    if not is_resolved(record) or record.receiver_archived:
        return record
    return record.model_copy(update={"receiver_archived": True})


def mark_sender_archived(record: HandoverRecord) -> HandoverRecord:
    """Hide a resolved record from the sender's active outbox. PENDING records are returned unchanged."""
    if not is_resolved(record) or record.sender_archived:
        return record
    return record.model_copy(update={"sender_archived": True})
