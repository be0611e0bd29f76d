from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...domain.codec import TokenCodec
from ...domain.constants import DEFAULT_TOKEN_LABEL, TokenKind
from ...domain.entities import TokenRecord
from ...domain.policy import ExpirationPolicy
from ...domain.ports import Clock, TokenStore
from ...domain.value_objects import PrincipalRef, TokenId
from ...logging_config import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class IssueTokenUseCase:
    """
    Application use case:
    - Generate a fresh time-ordered TokenId
    - Persist its TokenRecord with the store retention TTL
    - Return the wire string for the requested kind

    Raises:
        StoreError if the record cannot be written.
    """

    codec: TokenCodec
    policy: ExpirationPolicy
    store: TokenStore
    clock: Clock

    def execute(
            self,
            kind: TokenKind,
            label: Optional[str] = None,
            principal: Optional[PrincipalRef] = None,
            state: Optional[Mapping[str, Any]] = None,
    ) -> str:
        token_id = TokenId.generate(self.clock())
        created = token_id.timestamp_ms

        record = TokenRecord(
            token_id=token_id,
            label=label or DEFAULT_TOKEN_LABEL,
            created=created,
            accessed=created,
            principal=principal,
            state=dict(state or {}),
        )
        self.store.put(token_id, record, self.policy.persistence_ttl_seconds)

        logger.info(
            "token_created",
            token_id=str(token_id),
            kind=kind.label,
            label=record.label,
            principal_type=principal.kind.value if principal else None,
        )
        return self.codec.encode(kind, token_id, self.policy.ttl_for(kind))
