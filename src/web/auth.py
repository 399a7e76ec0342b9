"""Bearer token verification against the identity provider's published keys."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from errors import AuthError

logger = structlog.get_logger()

ALGORITHMS = ["RS256"]


@dataclass(frozen=True)
class AudienceStrategy:
    """One way of checking the ``aud`` claim. ``audience=None`` skips the check."""

    name: str
    audience: Optional[str]

    def decode(self, token: str, key: dict, issuer: str) -> dict:
        if self.audience is None:
            return jwt.decode(
                token, key, algorithms=ALGORITHMS, issuer=issuer,
                options={"verify_aud": False},
            )
        return jwt.decode(token, key, algorithms=ALGORITHMS, audience=self.audience, issuer=issuer)


def build_audience_strategies(
    audience: Optional[str], client_id: Optional[str]
) -> list[AudienceStrategy]:
    """Ordered audience checks: configured audience, client id, then none.

    The last strategy accepts any audience; signature, issuer and expiry are
    still enforced.
    """
    strategies = []
    if audience:
        strategies.append(AudienceStrategy("configured_audience", audience))
    if client_id and client_id != audience:
        strategies.append(AudienceStrategy("client_id", client_id))
    strategies.append(AudienceStrategy("any_audience", None))
    return strategies


def extract_email(claims: dict[str, Any]) -> str:
    """Return the subject's email from a top-level or namespaced claim."""
    email = claims.get("email")
    if isinstance(email, str) and email:
        return email

    # Providers put profile claims under custom keys like https://app/email
    for suffix_match in (True, False):
        for key, value in claims.items():
            if not isinstance(value, str) or not value:
                continue
            lowered = key.lower()
            if suffix_match and (lowered.endswith("/email") or lowered.endswith(":email")):
                return value
            if not suffix_match and "email" in lowered and "@" in value:
                return value

    raise AuthError("email not found")


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an Authorization header value."""
    if not authorization:
        raise AuthError("Authentication required: missing bearer token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Authentication required: malformed authorization header")
    return token.strip()


class TokenVerifier:
    """Verify provider-issued JWTs and resolve the caller's email."""

    def __init__(
        self,
        domain: str,
        audience: Optional[str] = None,
        client_id: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not domain:
            raise AuthError("Authentication is not configured")
        self.domain = domain.removeprefix("https://").rstrip("/")
        self.issuer = f"https://{self.domain}/"
        self.jwks_url = f"https://{self.domain}/.well-known/jwks.json"
        self.strategies = build_audience_strategies(audience, client_id)
        self.client = client

    async def verify(self, token: str) -> dict:
        """Return ``{"email": ...}`` for a valid token, raise AuthError otherwise."""
        if not token or token.count(".") != 2:
            raise AuthError("Invalid token: malformed")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise AuthError(f"Invalid token header: {e}") from e
        kid = header.get("kid")
        if not kid:
            raise AuthError("Invalid token: missing key id")

        key = await self._signing_key(kid)
        claims = self._decode(token, key)
        email = extract_email(claims)
        logger.info("auth.verified", email=email)
        return {"email": email}

    async def verify_header(self, authorization: Optional[str]) -> dict:
        return await self.verify(bearer_token(authorization))

    def _decode(self, token: str, key: dict) -> dict:
        last_error: Optional[Exception] = None
        for strategy in self.strategies:
            try:
                return strategy.decode(token, key, self.issuer)
            except ExpiredSignatureError as e:
                raise AuthError("Token expired") from e
            except JWTError as e:
                logger.debug("auth.strategy_failed", strategy=strategy.name, error=str(e))
                last_error = e
        raise AuthError(f"Token verification failed: {last_error}")

    async def _signing_key(self, kid: str) -> dict:
        try:
            jwks = await self._fetch_jwks()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("auth.jwks_fetch_failed", url=self.jwks_url, error=str(e))
            raise AuthError(f"Unable to fetch signing keys: {e}") from e

        keys = jwks.get("keys") if isinstance(jwks, dict) else None
        if not isinstance(keys, list):
            logger.warning("auth.jwks_malformed", url=self.jwks_url)
            raise AuthError("Unable to fetch signing keys: malformed key set")
        for key in keys:
            if isinstance(key, dict) and key.get("kid") == kid:
                return key
        raise AuthError("Signing key not found")

    async def _fetch_jwks(self) -> dict:
        if self.client is not None:
            response = await self.client.get(self.jwks_url)
            response.raise_for_status()
            return response.json()
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(self.jwks_url)
            response.raise_for_status()
            return response.json()
