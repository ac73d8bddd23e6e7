"""Authentication shared kernel module."""

from shared_kernel.auth.claims import ClaimsIdentity, ClaimTypes
from shared_kernel.auth.jwt_validator import InvalidTokenError, JWTValidator
from shared_kernel.auth.observability import (
    DefaultJWTValidatorProbe,
    JWTValidatorProbe,
)

__all__ = [
    "ClaimsIdentity",
    "ClaimTypes",
    "DefaultJWTValidatorProbe",
    "InvalidTokenError",
    "JWTValidator",
    "JWTValidatorProbe",
]
