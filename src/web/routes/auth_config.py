"""Public identity provider settings for the browser login flow."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from errors import MethodNotAllowedError
from web.deps import get_public_auth_config
from web.models import AuthConfigResponse

router = APIRouter(prefix="/api", tags=["auth"])


@router.api_route("/auth-config", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def auth_config(request: Request):
    """Domain and client id only. Never returns store or signing secrets."""
    if request.method != "GET":
        raise MethodNotAllowedError("Method not allowed")
    body = AuthConfigResponse.model_validate(get_public_auth_config())
    return JSONResponse(
        body.model_dump(by_alias=True),
        headers={"Cache-Control": "public, max-age=3600"},
    )
