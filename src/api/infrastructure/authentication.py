"""Starlette authentication backend for bearer tokens.

Populates ``request.user`` with a ``ClaimsIdentity`` before tenant
resolution runs. Requests without an ``Authorization: Bearer`` header get
the anonymous identity; malformed or invalid tokens are rejected with 401.
"""

from __future__ import annotations

from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    AuthenticationError,
)
from starlette.requests import HTTPConnection
from starlette.responses import JSONResponse, Response

from shared_kernel.auth import (
    ClaimsIdentity,
    DefaultJWTValidatorProbe,
    InvalidTokenError,
    JWTValidator,
)
from infrastructure.settings import AuthSettings


class BearerTokenBackend(AuthenticationBackend):
    """Authenticates requests carrying a signed bearer token."""

    def __init__(self, validator: JWTValidator):
        self._validator = validator

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> BearerTokenBackend:
        validator = JWTValidator(
            secret_key=settings.secret_key.get_secret_value(),
            algorithm=settings.algorithm,
            probe=DefaultJWTValidatorProbe(),
        )
        return cls(validator)

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, ClaimsIdentity] | None:
        authorization = conn.headers.get("Authorization")
        if not authorization:
            return AuthCredentials(), ClaimsIdentity.anonymous()

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationError("Unsupported authorization scheme")

        try:
            identity = await self._validator.validate_token(token.strip())
        except InvalidTokenError as e:
            raise AuthenticationError(str(e)) from e

        return AuthCredentials(["authenticated"]), identity


def on_authentication_error(conn: HTTPConnection, exc: Exception) -> Response:
    """Render authentication failures as 401 without token details."""
    return JSONResponse(
        {"detail": "Invalid authentication credentials"},
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
    )
