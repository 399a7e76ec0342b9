"""Error taxonomy shared by the proxy, the store client and the CLI."""

from typing import Any, Optional


class BrewlogError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class TransportError(BrewlogError):
    """Network or parse failure talking to the record store or identity provider."""

    status_code = 502


class StoreError(TransportError):
    """Non-success response from the record store."""


class AuthError(BrewlogError):
    """Missing, malformed, expired or unverifiable credential."""

    status_code = 401


class ForbiddenError(BrewlogError):
    """Verified identity that is not allowed to write."""

    status_code = 403


class ValidationError(BrewlogError):
    """Request is missing a field the action needs."""

    status_code = 400


class ConfigError(BrewlogError):
    """Server is missing required secrets."""

    status_code = 500


class MethodNotAllowedError(BrewlogError):
    status_code = 405
