from __future__ import annotations

from dataclasses import dataclass

from ...domain.codec import TokenCodec
from ...domain.constants import TokenKind
from ...domain.exceptions import TokenNotFoundError
from ...domain.policy import ExpirationPolicy
from ...domain.ports import Clock, TokenStore
from ...logging_config import get_logger
from .resolve import ResolveTokenUseCase

logger = get_logger(__name__)


@dataclass(slots=True)
class RefreshTokenUseCase:
    """
    Application use case:
    - Resolve the wire string and fetch its record, as a lookup does
    - Re-persist the record, restarting its store retention
    - Return a new ACCESS wire string bound to the same TokenId

    Raises:
        InvalidTokenError (and subclasses)
        TokenNotFoundError
        StoreError
    """

    codec: TokenCodec
    resolver: ResolveTokenUseCase
    store: TokenStore
    policy: ExpirationPolicy
    clock: Clock

    def execute(self, wire: str) -> str:
        decoded = self.resolver.execute(wire)
        token_id = decoded.token_id

        record = self.store.get(token_id)
        if record is None:
            logger.info("token_not_found", token_id=str(token_id), kind=decoded.kind.label)
            raise TokenNotFoundError(f"No record for token {token_id}")

        now = self.clock()
        record.mark_accessed(now)
        self.store.put(token_id, record, self.policy.persistence_ttl_seconds)

        logger.info("token_refreshed", token_id=str(token_id), from_kind=decoded.kind.label)

        # The access token keeps the refresh token's id, so both of its
        # expiry checks count from that id's creation time.
        expires_at = self.policy.embedded_expiry_for(TokenKind.ACCESS, token_id)
        if not self.policy.is_valid(TokenKind.ACCESS, token_id, expires_at, now):
            logger.warning("token_refreshed_expired", token_id=str(token_id), expires_at=expires_at)
        return self.codec.encode(TokenKind.ACCESS, token_id, self.policy.ttl_for(TokenKind.ACCESS))
