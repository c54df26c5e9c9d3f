"""Thin REST record store, the server side of HttpRecordStore."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from src.core.config import constants, settings
from src.core.store import RecordStore, get_record_store
from src.models.service_models import StoredRecords


logger = logging.getLogger(__name__)

router = APIRouter(prefix=constants.REMOTE_STORE_PATH, tags=["store"])


async def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    """Reject requests without the configured key (open when none is configured)."""
    if settings.remote_store_api_key and x_api_key != settings.remote_store_api_key:
        logger.warning("store_auth_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


@router.get("/{owner_key}", dependencies=[Depends(require_api_key)])
async def get_records(owner_key: str, store: RecordStore = Depends(get_record_store)) -> StoredRecords:
    return StoredRecords(records=await store.load(owner_key))


@router.put("/{owner_key}", dependencies=[Depends(require_api_key)])
async def put_records(
    owner_key: str, body: StoredRecords, store: RecordStore = Depends(get_record_store)
) -> StoredRecords:
    await store.save(owner_key, body.records)
    return body
