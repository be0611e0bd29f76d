from __future__ import annotations

from dataclasses import dataclass

from ...domain.codec import TokenCodec
from ...domain.entities import DecodedToken
from ...domain.exceptions import InvalidTokenError
from ...domain.policy import ExpirationPolicy
from ...domain.ports import Clock
from ...logging_config import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class ResolveTokenUseCase:
    """
    Application use case:
    - Decode and verify a wire string via TokenCodec
    - Apply both ExpirationPolicy checks

    Stateless; needs no store access.

    Raises one of the InvalidTokenError subclasses, so diagnostics can tell
    them apart. Callers facing the outside world must not.
    """

    codec: TokenCodec
    policy: ExpirationPolicy
    clock: Clock

    def execute(self, wire: str) -> DecodedToken:
        try:
            decoded = self.codec.decode(wire)
            self.policy.check(decoded, self.clock())
        except InvalidTokenError as exc:
            logger.info("token_rejected", reason=exc.reason, detail=str(exc))
            raise
        return decoded
