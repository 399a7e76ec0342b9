"""HTTP client for the brewlog proxy endpoint."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from records.models import Record, SortSpec

logger = structlog.get_logger()


class ProxyClientError(Exception):
    """Non-success response from the proxy."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ProxyClient:
    """Async wrapper around the proxy's POST actions."""

    def __init__(
        self,
        proxy_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.proxy_url = proxy_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def call(self, action: str, token: Optional[str] = None, **payload: Any) -> Any:
        body = {"action": action, **{k: v for k, v in payload.items() if v is not None}}
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.post(self.proxy_url, json=body, headers=headers)
        except httpx.RequestError as e:
            raise ProxyClientError(0, f"Request failed: {e}") from e

        if not response.is_success:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            logger.debug("proxy_client.error", action=action, status=response.status_code)
            raise ProxyClientError(
                response.status_code,
                message or f"Request failed: {response.reason_phrase}",
            )
        return response.json()

    async def list(
        self,
        table: str,
        sort: Optional[SortSpec] = None,
        filter_formula: Optional[str] = None,
    ) -> list[Record]:
        sort_body = {"field": sort.field, "direction": str(sort.direction)} if sort else None
        data = await self.call("list", table=table, sort=sort_body, filter=filter_formula)
        return [Record.from_api(r) for r in data.get("records", [])]

    async def get(self, table: str, record_id: str) -> Record:
        return Record.from_api(await self.call("get", table=table, recordId=record_id))

    async def create(self, table: str, fields: dict, token: Optional[str]) -> Record:
        data = await self.call("create", token=token, table=table, data={"fields": fields})
        return Record.from_api(data)

    async def get_user_config(self, token: Optional[str]) -> dict:
        return await self.call("getUserConfig", token=token)

    async def list_user_coffees(
        self,
        token: Optional[str] = None,
        user_base_id: Optional[str] = None,
        user_api_key: Optional[str] = None,
    ) -> tuple[list[Record], bool]:
        data = await self.call(
            "listUserCoffees", token=token, userBaseId=user_base_id, userApiKey=user_api_key
        )
        records = [Record.from_api(r) for r in data.get("records", [])]
        return records, bool(data.get("isPersonal"))

    async def copy_to_community_stash(
        self, coffee_id: str, coffee_name: str, user_base_id: str, user_api_key: str
    ) -> dict:
        return await self.call(
            "copyToCommunityStash",
            coffeeId=coffee_id,
            coffeeName=coffee_name,
            userBaseId=user_base_id,
            userApiKey=user_api_key,
        )
