"""Per-user client state and the flows that drive it.

One BrewSession replaces the page-global credential, catalog and brew cache
a browser front end would keep, so every handler gets it passed in.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from brews.client import ProxyClient, ProxyClientError
from brews.drafts import BrewDraft, CoffeeChoice
from brews.view import BrewListView, Page
from records.models import Record, SortSpec
from shared_types import BrewField, SortDirection

logger = structlog.get_logger()

# 401 bodies that mean the credential itself is bad, as opposed to a
# validation problem reported with the same status
AUTH_FAILURE_HINTS = (
    "token",
    "authentication",
    "unauthorized",
    "expired",
    "signing key",
    "email not found",
)

FORBIDDEN_MESSAGE = (
    "Your account is not authorized to log brews. "
    "Contact the administrator to request access."
)


@dataclass(frozen=True)
class UserCatalog:
    has_personal_base: bool
    base_id: Optional[str] = None
    api_key: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict) -> "UserCatalog":
        if not data.get("hasPersonalBase"):
            return cls(has_personal_base=False)
        return cls(True, data.get("baseId"), data.get("apiKey"))


@dataclass(frozen=True)
class ErrorOutcome:
    message: str
    login_required: bool = False


def is_auth_failure(err: ProxyClientError) -> bool:
    if err.status_code != 401:
        return False
    text = err.message.lower()
    return any(hint in text for hint in AUTH_FAILURE_HINTS)


@dataclass
class BrewSession:
    client: ProxyClient
    brew_table: str = "Coffee Brews"
    token: Optional[str] = None
    catalog: Optional[UserCatalog] = None
    coffees: list[Record] = field(default_factory=list)
    coffees_personal: bool = False
    view: BrewListView = field(default_factory=BrewListView)

    @property
    def logged_in(self) -> bool:
        return bool(self.token)

    def clear_credential(self) -> None:
        self.token = None
        self.catalog = None

    async def load_user_config(self) -> UserCatalog:
        if not self.token:
            self.catalog = UserCatalog(has_personal_base=False)
            return self.catalog
        self.catalog = UserCatalog.from_response(await self.client.get_user_config(self.token))
        return self.catalog

    async def load_coffees(self) -> list[Record]:
        catalog = self.catalog
        if catalog and catalog.has_personal_base:
            records, personal = await self.client.list_user_coffees(
                user_base_id=catalog.base_id, user_api_key=catalog.api_key
            )
        else:
            records, personal = await self.client.list_user_coffees(token=self.token)
        self.coffees = records
        self.coffees_personal = personal
        return records

    def coffee_choice(self, record_id: str) -> CoffeeChoice:
        for record in self.coffees:
            if record.id == record_id:
                return CoffeeChoice.from_record(record, is_personal=self.coffees_personal)
        raise KeyError(record_id)

    async def load_brews(self) -> Page:
        records = await self.client.list(
            self.brew_table, sort=SortSpec(BrewField.BREW_DATE.value, SortDirection.DESC)
        )
        self.view.set_data(records)
        return self.view.current()

    async def submit_brew(self, draft: BrewDraft) -> Record:
        """Create the brew, copying a personal coffee to the shared catalog first."""
        if not self.token:
            raise ProxyClientError(401, "Authentication required: please log in")

        link = draft.coffee.record_id
        catalog = self.catalog
        if draft.coffee.is_personal and catalog and catalog.has_personal_base:
            result = await self.client.copy_to_community_stash(
                coffee_id=draft.coffee.record_id,
                coffee_name=draft.coffee.name,
                user_base_id=catalog.base_id,
                user_api_key=catalog.api_key,
            )
            link = result["communityStashId"]

        record = await self.client.create(self.brew_table, draft.to_fields(link), self.token)
        logger.info("session.brew_created", record_id=record.id)
        return record

    def handle_error(self, err: ProxyClientError) -> ErrorOutcome:
        if is_auth_failure(err):
            self.clear_credential()
            return ErrorOutcome("Your session has expired. Please log in again.", login_required=True)
        if err.status_code == 403:
            return ErrorOutcome(FORBIDDEN_MESSAGE)
        return ErrorOutcome(err.message)
