"""Action dispatch for the record store proxy."""

from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from errors import AuthError, ForbiddenError, ValidationError
from records import RecordStoreClient, SortSpec
from records.formula import field_equals, opened_and_not_killed
from records.models import Record
from shared_types import BrewField, CoffeeField, ProxyAction
from web.auth import TokenVerifier
from web.models import CopyToCommunityResponse, ProxyRequest
from web.policy import AccessPolicy, CatalogDescriptor

logger = structlog.get_logger()

AUTH_REQUIRED = {ProxyAction.CREATE, ProxyAction.GET_USER_CONFIG}

TABLE_ACTIONS = {ProxyAction.LIST, ProxyAction.GET, ProxyAction.CREATE}

# Fields carried over when a personal coffee is copied into the shared catalog
COMMUNITY_COPY_FIELDS = [
    CoffeeField.NAME,
    CoffeeField.ROASTER,
    CoffeeField.ORIGIN,
    CoffeeField.PROCESS,
    CoffeeField.VARIETAL,
    CoffeeField.ROAST_DATE,
]


def valid_actions() -> str:
    return ", ".join(a.value for a in ProxyAction)


def parse_request(payload: Any) -> ProxyRequest:
    """Validate the body and the fields its action needs.

    Runs before any credential check or outbound call.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        request = ProxyRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid request body",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e

    if request.action not in {a.value for a in ProxyAction}:
        raise ValidationError(f"Invalid action. Use: {valid_actions()}")
    action = ProxyAction(request.action)

    if action in TABLE_ACTIONS and not request.table:
        raise ValidationError(f"table required for {action} action")
    if action == ProxyAction.GET and not request.record_id:
        raise ValidationError("recordId required for get action")
    if action == ProxyAction.CREATE:
        fields = (request.data or {}).get("fields")
        if not isinstance(fields, dict) or not fields:
            raise ValidationError("data.fields required for create action")
    if action == ProxyAction.COPY_TO_COMMUNITY_STASH:
        missing = [
            name
            for name, value in (
                ("coffeeId", request.coffee_id),
                ("userBaseId", request.user_base_id),
                ("userApiKey", request.user_api_key),
                ("coffeeName", request.coffee_name),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"{', '.join(missing)} required for {action} action")
    return request


def is_brewable(record: Record) -> bool:
    return bool(record.get(CoffeeField.OPENED)) and not record.get(CoffeeField.KILLED)


class ProxyRouter:
    """Routes one proxy request to the store, verifier and policy."""

    def __init__(
        self,
        store: RecordStoreClient,
        policy: AccessPolicy,
        verifier: Optional[TokenVerifier] = None,
        brew_table: str = "Coffee Brews",
        enforce_write_auth: bool = True,
    ):
        self.store = store
        self.policy = policy
        self.verifier = verifier
        self.brew_table = brew_table
        self.enforce_write_auth = enforce_write_auth
        self._handlers = {
            ProxyAction.LIST: self._list,
            ProxyAction.GET: self._get,
            ProxyAction.CREATE: self._create,
            ProxyAction.GET_USER_CONFIG: self._get_user_config,
            ProxyAction.LIST_USER_COFFEES: self._list_user_coffees,
            ProxyAction.COPY_TO_COMMUNITY_STASH: self._copy_to_community_stash,
        }

    async def handle(self, payload: Any, authorization: Optional[str] = None) -> dict:
        request = parse_request(payload)
        action = ProxyAction(request.action)

        email = None
        if action in AUTH_REQUIRED and (self.enforce_write_auth or action != ProxyAction.CREATE):
            email = await self._authenticate(authorization)
            if action == ProxyAction.CREATE and not await self.policy.authorize_write(email):
                logger.info("proxy.write_denied", email=email, table=request.table)
                raise ForbiddenError(
                    "Access denied: your account is not authorized to log brews. "
                    "Contact the administrator to request access."
                )

        logger.info("proxy.dispatch", action=str(action), table=request.table)
        return await self._handlers[action](request, email, authorization)

    async def _authenticate(self, authorization: Optional[str]) -> str:
        if self.verifier is None:
            raise AuthError("Authentication required: identity provider not configured")
        identity = await self.verifier.verify_header(authorization)
        return identity["email"]

    async def _list(self, request: ProxyRequest, email, authorization) -> dict:
        sort = SortSpec(request.sort.field, request.sort.direction) if request.sort else None
        records = await self.store.list(request.table, filter_formula=request.filter, sort=sort)
        return {"records": [r.to_dict() for r in records]}

    async def _get(self, request: ProxyRequest, email, authorization) -> dict:
        record = await self.store.get(request.table, request.record_id)
        return record.to_dict()

    async def _create(self, request: ProxyRequest, email, authorization) -> dict:
        fields = dict(request.data["fields"])
        if email and request.table == self.brew_table:
            fields[BrewField.CREATED_BY.value] = email
        record = await self.store.create(request.table, fields)
        return record.to_dict()

    async def _get_user_config(self, request: ProxyRequest, email, authorization) -> dict:
        catalog = await self.policy.resolve_catalog(email)
        return catalog.public_view()

    async def _list_user_coffees(self, request: ProxyRequest, email, authorization) -> dict:
        catalog = await self._catalog_for(request, authorization)
        records = await self.store.list(
            catalog.table_name,
            filter_formula=opened_and_not_killed(CoffeeField.OPENED, CoffeeField.KILLED),
            base_id=catalog.base_id,
            api_key=catalog.api_key,
        )
        coffees = [r for r in records if is_brewable(r)]
        return {"records": [r.to_dict() for r in coffees], "isPersonal": catalog.is_personal}

    async def _catalog_for(self, request: ProxyRequest, authorization: Optional[str]) -> CatalogDescriptor:
        if request.user_base_id and request.user_api_key:
            return CatalogDescriptor(
                base_id=request.user_base_id,
                api_key=request.user_api_key,
                table_name=self.policy.personal_table,
                is_personal=True,
            )
        if authorization and self.verifier is not None:
            # Optional login: a bad token just means the shared catalog
            try:
                identity = await self.verifier.verify_header(authorization)
            except AuthError as e:
                logger.info("proxy.optional_auth_failed", error=str(e))
            else:
                return await self.policy.resolve_catalog(identity["email"])
        return self.policy.shared_catalog()

    async def _copy_to_community_stash(self, request: ProxyRequest, email, authorization) -> dict:
        shared = self.policy.shared_catalog()
        existing = await self.store.list(
            shared.table_name,
            filter_formula=field_equals(CoffeeField.NAME, request.coffee_name),
            base_id=shared.base_id,
            api_key=shared.api_key,
        )
        for record in existing:
            if record.get(CoffeeField.NAME) == request.coffee_name:
                logger.info("proxy.community_copy_exists", record_id=record.id)
                return _copy_response(record.id, existed=True)

        # Check-then-create: concurrent callers can both miss and both create.
        source = await self.store.get(
            self.policy.personal_table,
            request.coffee_id,
            base_id=request.user_base_id,
            api_key=request.user_api_key,
        )
        fields = {f.value: source.fields[f] for f in COMMUNITY_COPY_FIELDS if f in source.fields}
        fields[CoffeeField.NAME.value] = request.coffee_name
        created = await self.store.create(
            shared.table_name, fields, base_id=shared.base_id, api_key=shared.api_key
        )
        logger.info("proxy.community_copy_created", record_id=created.id)
        return _copy_response(created.id, existed=False)


def _copy_response(record_id: str, existed: bool) -> dict:
    return CopyToCommunityResponse(community_stash_id=record_id, existed=existed).model_dump(
        by_alias=True
    )
