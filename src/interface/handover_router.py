"""HTTP routes exposing the handover operations and collaboration views."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.core.errors import (
    DatabaseError,
    InvalidTransitionError,
    RecordNotFoundError,
    classify_error_with_response,
)
from src.core.store import RecordStore, get_record_store
from src.models.service_models import (
    ArchiveAllRequest,
    ArchiveRequest,
    CompleteTaskRequest,
    RefreshOutboxRequest,
    RespondRequest,
    TaskListResponse,
)
from src.services import collab_view_service, handover_service
from src.services.task_store_service import load_tasks


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orgs/{org_id}", tags=["handovers"])


def _error_response(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(content=classify_error_with_response(exc).model_dump(mode="json"), status_code=status_code)


async def invalid_transition_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.info("handover_rejected", extra={"error": str(exc)})
    return _error_response(exc, status.HTTP_409_CONFLICT)


async def not_found_handler(_request: Request, exc: Exception) -> JSONResponse:
    return _error_response(exc, status.HTTP_404_NOT_FOUND)


async def store_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("store_unavailable", extra={"error": str(exc)})
    return _error_response(exc, status.HTTP_503_SERVICE_UNAVAILABLE)


EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    InvalidTransitionError: invalid_transition_handler,
    RecordNotFoundError: not_found_handler,
    DatabaseError: store_error_handler,
}


@router.post("/handovers/complete")
async def complete_task(
    org_id: str, body: CompleteTaskRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    """Complete a task and hand it over if a recipient is named."""
    tasks = await handover_service.complete_and_handover(
        store=store,
        org_id=org_id,
        task_id=body.task_id,
        from_user=body.from_user,
        to_user=body.to_user,
        remark=body.remark,
    )
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/respond")
async def respond(org_id: str, body: RespondRequest, store: RecordStore = Depends(get_record_store)) -> TaskListResponse:
    """Accept, question, or reject the latest handover of a task."""
    tasks = await handover_service.respond_to_handover(
        store=store,
        org_id=org_id,
        receiver=body.receiver,
        task_id=body.task_id,
        status=body.status,
        response=body.response,
    )
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/archive/receiver")
async def archive_receiver(
    org_id: str, body: ArchiveRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    tasks = await handover_service.archive_for_receiver(
        store=store, org_id=org_id, receiver=body.username, task_id=body.task_id
    )
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/archive/sender")
async def archive_sender(
    org_id: str, body: ArchiveRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    tasks = await handover_service.archive_for_sender(
        store=store, org_id=org_id, sender=body.username, task_id=body.task_id
    )
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/archive/receiver/all")
async def archive_receiver_all(
    org_id: str, body: ArchiveAllRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    tasks = await handover_service.archive_all_resolved_for_receiver(store=store, org_id=org_id, receiver=body.username)
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/archive/sender/all")
async def archive_sender_all(
    org_id: str, body: ArchiveAllRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    tasks = await handover_service.archive_all_resolved_for_sender(store=store, org_id=org_id, sender=body.username)
    return TaskListResponse.from_tasks(tasks)


@router.post("/handovers/refresh-outbox")
async def refresh_outbox(
    org_id: str, body: RefreshOutboxRequest, store: RecordStore = Depends(get_record_store)
) -> TaskListResponse:
    """Pull responses the sender missed into their outbox."""
    tasks = await handover_service.refresh_outbox(store=store, org_id=org_id, sender=body.sender)
    return TaskListResponse.from_tasks(tasks)


@router.get("/users/{username}/collab")
async def collab_views(
    org_id: str, username: str, last_seen: int = 0, store: RecordStore = Depends(get_record_store)
) -> JSONResponse:
    """Inbox and outbox views for a user's collaboration page."""
    tasks = await load_tasks(store=store, org_id=org_id, username=username)
    views = collab_view_service.build_collab_views(tasks, username, last_seen=last_seen)
    return JSONResponse(
        content={
            "inbox_pending": [task.to_record() for task in views.inbox_pending],
            "inbox_history": [task.to_record() for task in views.inbox_history],
            "outbox_active": [task.to_record() for task in views.outbox_active],
            "outbox_history": [task.to_record() for task in views.outbox_history],
            "unread_count": views.unread_count,
        }
    )
