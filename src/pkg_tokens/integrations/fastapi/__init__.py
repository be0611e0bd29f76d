from __future__ import annotations

from typing import Optional

from .deps import FastAPITokenAuth
from .security import DEFAULT_COOKIE_NAME, bearer_scheme, extract_token_from_request
from ..common.service_factory import create_token_service
from ...config.settings import TokenSettings
from ...domain.ports import TokenStore


def create_fastapi_token_auth(
    settings: TokenSettings,
    *,
    store: Optional[TokenStore] = None,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> FastAPITokenAuth:
    """
    High-level helper for FastAPI apps:

    - Creates a TokenService from TokenSettings
    - Wraps it in FastAPITokenAuth, exposing dependencies like:

        token_auth.get_current_token
        token_auth.get_optional_token
    """
    service = create_token_service(settings, store=store)
    return FastAPITokenAuth(service=service, cookie_name=cookie_name)


__all__ = [
    "FastAPITokenAuth",
    "bearer_scheme",
    "create_fastapi_token_auth",
    "extract_token_from_request",
]
