from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .constants import LONG_TOKEN_AGE_MS, TokenKind
from .entities import DecodedToken
from .exceptions import TokenExpiredError
from .value_objects import TokenId


def _default_ttls() -> Mapping[TokenKind, int]:
    return MappingProxyType({kind: kind.default_ttl_ms for kind in TokenKind})


@dataclass(frozen=True, slots=True)
class ExpirationPolicy:
    """
    Per-kind time-to-live plus the store retention age.

    Built once during configuration and shared read-only afterwards.
    Use `with_overrides` to derive a policy with different TTLs; an
    existing policy is never changed.

    A token is honored only while BOTH hold:
      - now <= created + ttl_for(kind)      (kind TTL, from the id itself)
      - now <= expires_at                   (embedded expiry, if the kind has one)

    The first check uses the TTL configured *now*, so shortening a kind's TTL
    retires outstanding tokens even though their embedded expiry was signed
    with the older, longer value.
    """

    ttls: Mapping[TokenKind, int] = field(default_factory=_default_ttls)
    max_persistence_age_ms: int = LONG_TOKEN_AGE_MS

    @classmethod
    def default(cls) -> ExpirationPolicy:
        return cls()

    @classmethod
    def with_overrides(
            cls,
            ttl_overrides_ms: Optional[Mapping[TokenKind, int]] = None,
            max_persistence_age_ms: Optional[int] = None,
    ) -> ExpirationPolicy:
        """
        Build a policy from per-kind overrides.

        Non-positive overrides are ignored and the default is kept.
        """
        ttls = {kind: kind.default_ttl_ms for kind in TokenKind}
        for kind, ttl in (ttl_overrides_ms or {}).items():
            if ttl is not None and ttl > 0:
                ttls[kind] = int(ttl)

        persistence = LONG_TOKEN_AGE_MS
        if max_persistence_age_ms is not None and max_persistence_age_ms > 0:
            persistence = int(max_persistence_age_ms)

        return cls(ttls=MappingProxyType(ttls), max_persistence_age_ms=persistence)

    # ---- lookups ---------------------------------------------------------

    def ttl_for(self, kind: TokenKind) -> int:
        return self.ttls.get(kind, kind.default_ttl_ms)

    @property
    def persistence_ttl_seconds(self) -> int:
        return self.max_persistence_age_ms // 1000

    def embedded_expiry_for(self, kind: TokenKind, token_id: TokenId) -> Optional[int]:
        if not kind.carries_embedded_expiry:
            return None
        return token_id.timestamp_ms + self.ttl_for(kind)

    # ---- validation ------------------------------------------------------

    def check(self, decoded: DecodedToken, now_ms: int) -> None:
        """
        Raises:
            TokenExpiredError if either expiration check fails.
        """
        kind = decoded.kind
        if now_ms > decoded.created + self.ttl_for(kind):
            raise TokenExpiredError(f"{kind.label} token exceeded its TTL")

        if kind.carries_embedded_expiry and decoded.expires_at is not None:
            if now_ms > decoded.expires_at:
                raise TokenExpiredError(f"{kind.label} token passed its embedded expiry")

    def is_valid(
            self,
            kind: TokenKind,
            token_id: TokenId,
            expires_at: Optional[int],
            now_ms: int,
    ) -> bool:
        try:
            self.check(DecodedToken(kind=kind, token_id=token_id, expires_at=expires_at), now_ms)
        except TokenExpiredError:
            return False
        return True
