"""Write authorization and per-user catalog selection."""

from dataclasses import dataclass
from typing import Optional

import structlog

from records import RecordStoreClient
from records.formula import field_equals_ignore_case

logger = structlog.get_logger()


@dataclass(frozen=True)
class CatalogDescriptor:
    """Where a caller's coffees live."""

    base_id: str
    api_key: str
    table_name: str
    is_personal: bool

    def public_view(self) -> dict:
        """Shape returned to the authenticated caller; shared creds never leave."""
        if not self.is_personal:
            return {"hasPersonalBase": False}
        return {"hasPersonalBase": True, "baseId": self.base_id, "apiKey": self.api_key}


class AccessPolicy:
    """Allow-list and user-profile lookups against the main base.

    Both lookups fail open on errors. An explicit miss on the allow-list denies.
    """

    def __init__(
        self,
        store: RecordStoreClient,
        allowlist_table: str = "Authorized Users",
        users_table: str = "Users",
        personal_table: str = "Coffee Freezer",
        shared_base_id: Optional[str] = None,
        shared_api_key: Optional[str] = None,
        shared_table: str = "Community Stash",
        email_field: str = "Email",
        base_id_field: str = "Base ID",
        api_key_field: str = "API Key",
    ):
        self.store = store
        self.allowlist_table = allowlist_table
        self.users_table = users_table
        self.personal_table = personal_table
        self.shared_table = shared_table
        self.shared_base_id = shared_base_id or store.base_id
        self.shared_api_key = shared_api_key or store.api_key
        self.email_field = email_field
        self.base_id_field = base_id_field
        self.api_key_field = api_key_field

    def _matches(self, row, email: str) -> bool:
        return str(row.get(self.email_field) or "").strip().lower() == email.strip().lower()

    def shared_catalog(self) -> CatalogDescriptor:
        return CatalogDescriptor(
            base_id=self.shared_base_id,
            api_key=self.shared_api_key,
            table_name=self.shared_table,
            is_personal=False,
        )

    async def authorize_write(self, email: str) -> bool:
        try:
            rows = await self.store.list(
                self.allowlist_table,
                filter_formula=field_equals_ignore_case(self.email_field, email),
            )
        except Exception as e:
            logger.warning("policy.allowlist_lookup_failed", error=str(e))
            return True

        allowed = any(self._matches(row, email) for row in rows)
        logger.info("policy.authorize_write", email=email, allowed=allowed)
        return allowed

    async def resolve_catalog(self, email: str) -> CatalogDescriptor:
        try:
            rows = await self.store.list(
                self.users_table,
                filter_formula=field_equals_ignore_case(self.email_field, email),
            )
        except Exception as e:
            logger.warning("policy.profile_lookup_failed", error=str(e))
            return self.shared_catalog()

        for row in rows:
            if not self._matches(row, email):
                continue
            base_id = row.get(self.base_id_field)
            api_key = row.get(self.api_key_field)
            if base_id and api_key:
                return CatalogDescriptor(
                    base_id=base_id,
                    api_key=api_key,
                    table_name=self.personal_table,
                    is_personal=True,
                )
        return self.shared_catalog()
