"""Pydantic configuration models for brewlog."""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class StoreConfig(BaseModel):
    """Record store endpoint and table names."""

    api_url: str = "https://api.airtable.com/v0"
    brew_table: str = "Coffee Brews"
    coffee_table: str = "Coffee Freezer"
    community_table: str = "Community Stash"
    allowlist_table: str = "Authorized Users"
    users_table: str = "Users"

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {v}")
        return v.rstrip("/")


class IdentityConfig(BaseModel):
    """Identity provider settings. Env vars win over file values."""

    domain: Optional[str] = None
    client_id: Optional[str] = None
    audience: Optional[str] = None
    enforce_write_auth: bool = True


class ClientConfig(BaseModel):
    """CLI client settings."""

    proxy_url: str = "http://localhost:8000/api/proxy"
    token: Optional[str] = None
    page_size: int = 10
    timeout: float = 30.0

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"page_size must be >= 1, got {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


def _expand_env(value: Optional[str]) -> Optional[str]:
    if value and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class BrewlogConfig(BaseModel):
    """Main configuration model."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in identity and client values."""
        self.identity.domain = _expand_env(self.identity.domain)
        self.identity.client_id = _expand_env(self.identity.client_id)
        self.identity.audience = _expand_env(self.identity.audience)
        self.client.token = _expand_env(self.client.token)
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "BrewlogConfig":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
