from __future__ import annotations

from dataclasses import dataclass

from ...domain.entities import TokenRecord
from ...domain.exceptions import StoreError, TokenNotFoundError
from ...domain.policy import ExpirationPolicy
from ...domain.ports import Clock, TokenStore
from ...logging_config import get_logger
from .resolve import ResolveTokenUseCase

logger = get_logger(__name__)


@dataclass(slots=True)
class LookupTokenUseCase:
    """
    Application use case:
    - Resolve the wire string (signature + expiration)
    - Fetch the TokenRecord from the store
    - Record the access time

    The access-time update is best-effort: the record has already been read,
    so a failing write is logged and the record still returned.

    Raises:
        InvalidTokenError (and subclasses)
        TokenNotFoundError
        StoreError if the record cannot be read
    """

    resolver: ResolveTokenUseCase
    store: TokenStore
    policy: ExpirationPolicy
    clock: Clock

    def execute(self, wire: str) -> TokenRecord:
        decoded = self.resolver.execute(wire)
        token_id = decoded.token_id

        record = self.store.get(token_id)
        if record is None:
            logger.info("token_not_found", token_id=str(token_id), kind=decoded.kind.label)
            raise TokenNotFoundError(f"No record for token {token_id}")

        record.mark_accessed(self.clock())
        try:
            self.store.set_accessed(token_id, record.accessed, self.policy.persistence_ttl_seconds)
        except StoreError as exc:
            logger.warning("token_access_update_failed", token_id=str(token_id), error=str(exc))

        return record


@dataclass(slots=True)
class TouchTokenUseCase:
    """
    Application use case: resolve the wire string and bump `accessed`
    without reading the record body.

    A record that is already gone stays gone (the store skips the write),
    so success only means the token itself was valid.

    Raises:
        InvalidTokenError (and subclasses)
        StoreError
    """

    resolver: ResolveTokenUseCase
    store: TokenStore
    policy: ExpirationPolicy
    clock: Clock

    def execute(self, wire: str) -> None:
        decoded = self.resolver.execute(wire)
        self.store.set_accessed(decoded.token_id, self.clock(), self.policy.persistence_ttl_seconds)
        logger.debug("token_touched", token_id=str(decoded.token_id))
