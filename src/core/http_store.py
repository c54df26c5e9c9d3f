"""Record store backed by a thin REST service (see src/interface/store_router.py)."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.core.config import constants
from src.core.errors import DatabaseError


logger = logging.getLogger(__name__)


class HttpRecordStore:
    """Record store that reads and writes task lists over HTTP.

    GET returns the list (404 means no list yet); PUT replaces it wholesale.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"X-Api-Key": api_key} if api_key else {}
        self._transport = transport

    def _url(self, owner_key: str) -> str:
        return f"{self._base_url}{constants.REMOTE_STORE_PATH}/{quote(owner_key, safe='')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=constants.API_TIMEOUT_SECONDS,
            headers=self._headers,
            transport=self._transport,
        )

    async def load(self, owner_key: str) -> list[dict[str, Any]]:
        try:
            async with self._client() as client:
                response = await client.get(self._url(owner_key))
        except httpx.HTTPError as e:
            logger.error("remote_load_failed", extra={"owner_key": owner_key, "error": str(e)})
            raise DatabaseError(f"Failed to load records for {owner_key}: {e}") from e

        if response.status_code == constants.HTTP_NOT_FOUND:
            return []
        if not response.is_success:
            raise DatabaseError(f"Remote store returned {response.status_code} loading {owner_key}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error("remote_load_corrupt", extra={"owner_key": owner_key, "error": str(e)})
            raise DatabaseError(f"Remote store returned a non-JSON body for {owner_key}") from e

        records = body.get("records", []) if isinstance(body, dict) else body
        if not isinstance(records, list):
            raise DatabaseError(f"Remote store returned malformed records for {owner_key}")
        return records

    async def save(self, owner_key: str, records: list[dict[str, Any]]) -> None:
        try:
            async with self._client() as client:
                response = await client.put(self._url(owner_key), json={"records": records})
        except httpx.HTTPError as e:
            logger.error("remote_save_failed", extra={"owner_key": owner_key, "error": str(e)})
            raise DatabaseError(f"Failed to save records for {owner_key}: {e}") from e

        if not response.is_success:
            logger.error(
                "remote_save_rejected",
                extra={"owner_key": owner_key, "status_code": response.status_code, "body": response.text[:200]},
            )
            raise DatabaseError(f"Remote store returned {response.status_code} saving {owner_key}")

        logger.info("Saved records remotely", extra={"owner_key": owner_key, "count": len(records)})
