"""Async client for the remote tabular record store (Airtable-style REST API)."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog

from errors import StoreError, TransportError
from records.models import Record, SortSpec

logger = structlog.get_logger().bind(source="record_store")

DEFAULT_API_URL = "https://api.airtable.com/v0"


class RecordStoreClient:
    """list / get / create against one default base, or a caller-supplied one.

    Every call accepts ``base_id`` and ``api_key`` overrides so the same
    client can address a user's personal base.
    """

    def __init__(
        self,
        base_id: str,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_id = base_id
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RecordStoreClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def table_url(self, table: str, base_id: Optional[str] = None) -> str:
        return f"{self.api_url}/{base_id or self.base_id}/{quote(table, safe='')}"

    async def list(
        self,
        table: str,
        filter_formula: Optional[str] = None,
        sort: Optional[SortSpec] = None,
        base_id: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> list[Record]:
        """Fetch every record in ``table``, following continuation offsets.

        Pages are fetched one after another; an offset is only valid against
        the page that produced it.
        """
        url = self.table_url(table, base_id)
        base_params: list[tuple[str, str]] = []
        if filter_formula:
            base_params.append(("filterByFormula", filter_formula))
        if sort:
            base_params.extend(sort.to_params())

        records: list[Record] = []
        offset: Optional[str] = None
        seen_offsets: set[str] = set()
        pages = 0
        while True:
            params = list(base_params)
            if offset:
                params.append(("offset", offset))
            data = await self._request("GET", url, api_key, params=params)
            rows = data.get("records") or []
            if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
                raise StoreError(
                    "Invalid response from record store: records is not a list of objects",
                    status_code=502,
                )
            page = [Record.from_api(r) for r in rows]
            records.extend(page)
            pages += 1
            logger.debug("store.list.page", table=table, page=pages, count=len(page))
            offset = data.get("offset")
            if not offset:
                break
            if offset in seen_offsets:
                logger.warning("store.list.offset_repeated", table=table, page=pages)
                raise StoreError(f"Record store repeated list offset {offset!r}", status_code=502)
            seen_offsets.add(offset)

        logger.info("store.list", table=table, pages=pages, total=len(records))
        return records

    async def get(
        self,
        table: str,
        record_id: str,
        base_id: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> Record:
        url = f"{self.table_url(table, base_id)}/{quote(record_id, safe='')}"
        data = await self._request("GET", url, api_key)
        return Record.from_api(data)

    async def create(
        self,
        table: str,
        fields: dict[str, Any],
        base_id: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> Record:
        data = await self._request(
            "POST", self.table_url(table, base_id), api_key, json={"fields": fields}
        )
        record = Record.from_api(data)
        logger.info("store.create", table=table, record_id=record.id)
        return record

    async def _request(
        self,
        method: str,
        url: str,
        api_key: Optional[str],
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[dict] = None,
    ) -> dict:
        headers = {
            "Authorization": f"Bearer {api_key or self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self.client.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.RequestError as e:
            logger.warning("store.request_failed", method=method, error=str(e))
            raise TransportError(f"Record store request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            raise StoreError(
                f"Invalid response from record store: {response.text[:200]}",
                status_code=response.status_code,
            )

        if not response.is_success:
            message = _error_message(data)
            logger.warning("store.error", status=response.status_code, error=message)
            raise StoreError(message, status_code=response.status_code)

        if not isinstance(data, dict):
            # status is 2xx here; report a bad gateway instead
            raise StoreError(
                f"Invalid response from record store: {response.text[:200]}",
                status_code=502,
            )

        return data


def _error_message(data: Any) -> str:
    """Pull a message out of the store's error envelope."""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message") or error.get("type") or "Record store API error"
        if isinstance(error, str):
            return error
    return "Record store API error"
