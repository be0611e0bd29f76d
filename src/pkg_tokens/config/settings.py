from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..domain.constants import (
    DEFAULT_SECRET_SALT,
    LONG_TOKEN_AGE_MS,
    SignatureVersion,
    TokenKind,
)
from ..domain.policy import ExpirationPolicy


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Token signing + expiration settings.

    Host code decides how to construct this (env, config file, etc.), once,
    before the service starts handling requests.
    """
    secret: str = DEFAULT_SECRET_SALT

    # Per-kind TTL overrides in milliseconds; non-positive values are ignored
    ttl_overrides_ms: Mapping[TokenKind, int] = field(default_factory=dict)
    max_persistence_age_ms: int = LONG_TOKEN_AGE_MS

    signature_version: SignatureVersion = SignatureVersion.LEGACY_SHA1
    accept_legacy_signatures: bool = True

    # Store wiring
    redis_url: Optional[str] = None
    redis_namespace: str = "tokens"

    log_level: str = "info"

    @property
    def uses_default_secret(self) -> bool:
        return self.secret == DEFAULT_SECRET_SALT

    def build_policy(self) -> ExpirationPolicy:
        return ExpirationPolicy.with_overrides(
            ttl_overrides_ms=self.ttl_overrides_ms,
            max_persistence_age_ms=self.max_persistence_age_ms,
        )
