"""
pkg_tokens.config

- TokenSettings: signing secret, per-kind TTL overrides, store wiring.
- settings_from_env: build TokenSettings from PKG_TOKENS_* variables.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import TokenSettings

__all__ = [
    "TokenSettings",
    "settings_from_env",
]
