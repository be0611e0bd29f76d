from __future__ import annotations

import os
from typing import Dict, Optional

from ..domain.constants import DEFAULT_SECRET_SALT, LONG_TOKEN_AGE_MS, SignatureVersion, TokenKind
from .settings import TokenSettings

ENV_PREFIX = "PKG_TOKENS_"


def settings_from_env() -> TokenSettings:
    def _int(key: str) -> Optional[int]:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return None
        try:
            return int(raw.strip())
        except ValueError:
            raise RuntimeError(f"Invalid integer for {key}: {raw!r}") from None

    def _bool(key: str, default: bool = True) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    overrides: Dict[TokenKind, int] = {}
    for kind in TokenKind:
        value = _int(f"{ENV_PREFIX}{kind.name}_EXPIRES")
        if value is not None and value > 0:
            overrides[kind] = value

    persistence = _int(f"{ENV_PREFIX}PERSISTENCE_EXPIRES")
    if persistence is None or persistence <= 0:
        persistence = LONG_TOKEN_AGE_MS

    version = _int(f"{ENV_PREFIX}SIGNATURE_VERSION")
    try:
        signature_version = SignatureVersion(version or SignatureVersion.LEGACY_SHA1)
    except ValueError:
        raise RuntimeError(
            f"Unsupported {ENV_PREFIX}SIGNATURE_VERSION: {version} "
            f"(expected one of {[int(v) for v in SignatureVersion]})"
        ) from None

    return TokenSettings(
        secret=os.getenv(f"{ENV_PREFIX}SECRET") or DEFAULT_SECRET_SALT,
        ttl_overrides_ms=overrides,
        max_persistence_age_ms=persistence,
        signature_version=signature_version,
        accept_legacy_signatures=_bool(f"{ENV_PREFIX}ACCEPT_LEGACY", True),
        redis_url=os.getenv(f"{ENV_PREFIX}REDIS_URL") or None,
        redis_namespace=os.getenv(f"{ENV_PREFIX}REDIS_NAMESPACE") or "tokens",
        log_level=os.getenv("LOG_LEVEL", "info"),
    )
