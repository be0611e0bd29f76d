from __future__ import annotations

from typing import Optional

from ...adapters.memory.store import InMemoryTokenStore
from ...adapters.redis.store import RedisTokenStore
from ...application.service import TokenService
from ...config.env import settings_from_env
from ...config.settings import TokenSettings
from ...domain.codec import TokenCodec
from ...domain.constants import TokenKind
from ...domain.ports import Clock, TokenStore
from ...logging_config import get_logger
from ...utils.time import utc_now_ms

logger = get_logger(__name__)


def create_token_service(
        settings: TokenSettings,
        *,
        store: Optional[TokenStore] = None,
        clock: Optional[Clock] = None,
) -> TokenService:
    """
    High-level factory: TokenSettings -> TokenService.

    - builds the ExpirationPolicy and TokenCodec once
    - picks the store: the one given, else Redis when `redis_url` is set,
      else an in-memory store
    - returns the TokenService facade; everything it holds is read-only
    """
    clock = clock or utc_now_ms
    policy = settings.build_policy()
    codec = TokenCodec(
        settings.secret,
        signature_version=settings.signature_version,
        accept_legacy=settings.accept_legacy_signatures,
    )

    if store is None:
        if settings.redis_url:
            store = RedisTokenStore.from_url(settings.redis_url, namespace=settings.redis_namespace)
        else:
            store = InMemoryTokenStore(clock=clock)

    if settings.uses_default_secret:
        logger.warning("default_token_secret_in_use")

    for kind in TokenKind:
        logger.info(
            "token_policy_configured",
            kind=kind.label,
            expires_after_seconds=policy.ttl_for(kind) // 1000,
        )
    logger.info(
        "token_store_configured",
        store=type(store).__name__,
        retention_seconds=policy.persistence_ttl_seconds,
        signature_version=int(codec.signature_version),
    )

    return TokenService(codec=codec, policy=policy, store=store, clock=clock)


def create_token_service_from_env(*, store: Optional[TokenStore] = None) -> TokenService:
    """Convenience wrapper using env-configured settings."""
    return create_token_service(settings_from_env(), store=store)
