"""Server settings and per-request collaborators."""

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import AsyncIterator, Optional

import httpx

from cli.config import load_config_model
from cli.config_models import BrewlogConfig
from errors import ConfigError
from records import RecordStoreClient
from web.auth import TokenVerifier
from web.policy import AccessPolicy
from web.proxy import ProxyRouter

MISSING_STORE_CREDENTIALS = "Server configuration error: Missing Airtable credentials"


@lru_cache
def get_config() -> BrewlogConfig:
    """Load shared config from brewlog.yaml."""
    return load_config_model()


@dataclass(frozen=True)
class ServerSettings:
    """Secrets from the environment merged with file config."""

    base_id: str
    api_key: str
    config: BrewlogConfig
    community_base_id: Optional[str] = None
    community_api_key: Optional[str] = None
    auth_domain: Optional[str] = None
    auth_client_id: Optional[str] = None
    auth_audience: Optional[str] = None


def get_server_settings() -> ServerSettings:
    """Read store and identity secrets. Raises ConfigError if the store ones are absent."""
    base_id = os.getenv("AIRTABLE_BASE_ID")
    api_key = os.getenv("AIRTABLE_API_KEY")
    if not base_id or not api_key:
        raise ConfigError(MISSING_STORE_CREDENTIALS)

    config = get_config()
    identity = config.identity
    return ServerSettings(
        base_id=base_id,
        api_key=api_key,
        config=config,
        community_base_id=os.getenv("COMMUNITY_BASE_ID") or None,
        community_api_key=os.getenv("COMMUNITY_API_KEY") or None,
        auth_domain=os.getenv("AUTH0_DOMAIN") or identity.domain,
        auth_client_id=os.getenv("AUTH0_CLIENT_ID") or identity.client_id,
        auth_audience=os.getenv("AUTH0_AUDIENCE") or identity.audience,
    )


def get_public_auth_config() -> dict:
    """Identity provider values that are safe to hand to the browser."""
    identity = get_config().identity
    return {
        "domain": os.getenv("AUTH0_DOMAIN") or identity.domain or "",
        "clientId": os.getenv("AUTH0_CLIENT_ID") or identity.client_id or "",
    }


@asynccontextmanager
async def open_proxy(settings: ServerSettings) -> AsyncIterator[ProxyRouter]:
    """Build a ProxyRouter sharing one HTTP client for the request's lifetime."""
    store_config = settings.config.store
    async with httpx.AsyncClient(timeout=30.0) as http:
        store = RecordStoreClient(
            base_id=settings.base_id,
            api_key=settings.api_key,
            api_url=store_config.api_url,
            client=http,
        )
        verifier = None
        if settings.auth_domain:
            verifier = TokenVerifier(
                domain=settings.auth_domain,
                audience=settings.auth_audience,
                client_id=settings.auth_client_id,
                client=http,
            )
        policy = AccessPolicy(
            store,
            allowlist_table=store_config.allowlist_table,
            users_table=store_config.users_table,
            personal_table=store_config.coffee_table,
            shared_base_id=settings.community_base_id,
            shared_api_key=settings.community_api_key,
            shared_table=store_config.community_table,
        )
        yield ProxyRouter(
            store,
            policy,
            verifier=verifier,
            brew_table=store_config.brew_table,
            enforce_write_auth=settings.config.identity.enforce_write_auth,
        )
