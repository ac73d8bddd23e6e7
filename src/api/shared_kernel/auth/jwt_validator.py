"""Bearer token validation.

Validates signed access tokens and turns their payload into a
``ClaimsIdentity``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from shared_kernel.auth.claims import ClaimsIdentity, ClaimTypes

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe


class InvalidTokenError(Exception):
    """Raised when JWT validation fails."""

    pass


class JWTValidator:
    """Validates JWT access tokens signed with a shared secret.

    Verifies signature and expiry and requires a subject claim. All other
    string-valued claims are carried onto the identity as issued.
    """

    def __init__(
        self,
        secret_key: str,
        probe: JWTValidatorProbe,
        algorithm: str = "HS256",
    ):
        """Initialize the JWT validator.

        Args:
            secret_key: Signing secret shared with the token issuer.
            probe: Observability probe for logging events.
            algorithm: Accepted JWS algorithm.
        """
        self._secret_key = secret_key
        self._probe = probe
        self._algorithm = algorithm

    async def validate_token(self, token: str) -> ClaimsIdentity:
        """Validate JWT and return the caller's identity.

        Args:
            token: The JWT token string.

        Returns:
            An authenticated ClaimsIdentity.

        Raises:
            InvalidTokenError: If token is invalid, expired, or verification fails.
        """
        if not self._secret_key:
            self._probe.token_validation_failed(reason="Signing secret not configured")
            raise InvalidTokenError("Token validation is not configured")

        try:
            payload = jwt.decode(
                token=token,
                key=self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            self._probe.token_validation_failed(reason="Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            self._probe.token_validation_failed(reason=f"Claims error: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            self._probe.token_validation_failed(reason=f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

        subject = payload.get(ClaimTypes.USER_ID)
        if subject is None:
            self._probe.token_validation_failed(reason="Missing sub claim")
            raise InvalidTokenError("Missing required claim: sub")

        identity = ClaimsIdentity(claims=_flatten_claims(payload))
        self._probe.token_validated(
            user_id=str(subject),
            claimed_tenant=identity.find_first(ClaimTypes.TENANT_SLUG),
        )
        return identity


def _flatten_claims(payload: dict[str, Any]) -> list[tuple[str, str]]:
    claims: list[tuple[str, str]] = []
    for claim_type, value in payload.items():
        if isinstance(value, list):
            claims.extend((claim_type, str(item)) for item in value)
        elif isinstance(value, (str, int)) and not isinstance(value, bool):
            claims.append((claim_type, str(value)))
    return claims
