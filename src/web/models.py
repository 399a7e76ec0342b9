"""Pydantic request/response schemas for the web API."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared_types import SortDirection

# --- Proxy ---


class SortRequest(BaseModel):
    field: str = Field(..., min_length=1)
    direction: SortDirection = SortDirection.DESC


class ProxyRequest(BaseModel):
    """Body of a POST to the proxy. Unused keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: Optional[str] = None
    table: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    record_id: Optional[str] = Field(None, alias="recordId")
    sort: Optional[SortRequest] = None
    filter: Optional[str] = None
    user_base_id: Optional[str] = Field(None, alias="userBaseId")
    user_api_key: Optional[str] = Field(None, alias="userApiKey")
    coffee_id: Optional[str] = Field(None, alias="coffeeId")
    coffee_name: Optional[str] = Field(None, alias="coffeeName")


class CopyToCommunityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    community_stash_id: str = Field(..., alias="communityStashId")
    existed: bool


# --- Auth config ---


class AuthConfigResponse(BaseModel):
    """Public identity provider settings for the browser login flow."""

    model_config = ConfigDict(populate_by_name=True)

    domain: str = ""
    client_id: str = Field("", alias="clientId")
