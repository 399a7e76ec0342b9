"""Single POST endpoint forwarding list/get/create and catalog actions to the record store."""

import json

import structlog
from fastapi import APIRouter, Request

from errors import BrewlogError, MethodNotAllowedError, ValidationError
from web.deps import get_server_settings, open_proxy

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["proxy"])


async def _read_json(request: Request):
    body = await request.body()
    if not body:
        raise ValidationError("Request body required")
    try:
        return json.loads(body)
    except ValueError as e:
        raise ValidationError(f"Invalid JSON body: {e}") from e


@router.api_route("/proxy", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def record_proxy(request: Request):
    if request.method != "POST":
        raise MethodNotAllowedError("Method not allowed")

    settings = get_server_settings()
    payload = await _read_json(request)

    async with open_proxy(settings) as proxy:
        try:
            return await proxy.handle(payload, request.headers.get("authorization"))
        except BrewlogError:
            raise
        except Exception as e:
            logger.exception("proxy.unhandled_error")
            raise BrewlogError(str(e)) from e
