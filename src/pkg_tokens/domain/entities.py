from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import SignatureVersion, TokenKind
from .value_objects import PrincipalRef, TokenId


@dataclass(slots=True)
class TokenRecord:
    """
    The persisted value behind a wire token.

    `created` and `accessed` are epoch milliseconds. `state` is opaque to
    the codec and the policy.
    """
    token_id: TokenId
    label: str
    created: int
    accessed: int
    principal: Optional[PrincipalRef] = None
    state: Dict[str, Any] = field(default_factory=dict)

    def mark_accessed(self, now_ms: int) -> None:
        # accessed never moves backwards
        self.accessed = max(self.accessed, now_ms)


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """
    Result of a successful decode: signature verified, expiry not yet checked.
    """
    kind: TokenKind
    token_id: TokenId
    expires_at: Optional[int]
    version: SignatureVersion = SignatureVersion.LEGACY_SHA1

    @property
    def created(self) -> int:
        return self.token_id.timestamp_ms
