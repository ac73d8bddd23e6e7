"""Domain probe for bearer token validation.

Token contents are never logged, only the subject, the tenant the token
was issued for and the rejection reason.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    """Domain probe for bearer token validation."""

    def token_validated(self, user_id: str, claimed_tenant: str | None = None) -> None:
        """Record that a token was accepted."""
        ...

    def token_validation_failed(self, reason: str) -> None:
        """Record that a token was rejected."""
        ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe:
        ...


class DefaultJWTValidatorProbe:
    """Structlog-backed JWTValidatorProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return self._context.as_dict() if self._context is not None else {}

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def token_validated(self, user_id: str, claimed_tenant: str | None = None) -> None:
        self._logger.debug(
            "bearer_token_accepted",
            user_id=user_id,
            claimed_tenant=claimed_tenant,
            **self._get_context_kwargs(),
        )

    def token_validation_failed(self, reason: str) -> None:
        # Rejections end in a 401 before tenant resolution runs
        self._logger.warning(
            "bearer_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )
