"""
pkg_tokens

Opaque bearer tokens binding a principal and arbitrary state to a
time-ordered identifier, with per-kind expiration policy. Clean-architecture
core that can be integrated with multiple frameworks (FastAPI, Strawberry).
"""

__version__ = "0.1.0"

from .domain.constants import PrincipalKind, SignatureVersion, TokenKind
from .domain.entities import DecodedToken, TokenRecord
from .domain.exceptions import (
    TokenError,
    InvalidTokenError,
    UnknownKindError,
    MalformedTokenError,
    InvalidSignatureError,
    TokenExpiredError,
    TokenNotFoundError,
    StoreError,
)
from .domain.value_objects import PrincipalRef, TokenId
from .domain.codec import TokenCodec
from .domain.policy import ExpirationPolicy
from .domain.ports import Clock, TokenStore

from .application.service import TokenService

from .adapters.memory.store import InMemoryTokenStore
from .adapters.redis.store import RedisTokenStore

from .config import TokenSettings, settings_from_env
from .integrations.common.service_factory import (
    create_token_service,
    create_token_service_from_env,
)
from .logging_config import configure_logging, get_logger

__all__ = [
    "__version__",
    # domain core
    "TokenKind",
    "PrincipalKind",
    "SignatureVersion",
    "TokenId",
    "PrincipalRef",
    "TokenRecord",
    "DecodedToken",
    "TokenCodec",
    "ExpirationPolicy",
    "TokenStore",
    "Clock",
    # exceptions
    "TokenError",
    "InvalidTokenError",
    "UnknownKindError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "TokenExpiredError",
    "TokenNotFoundError",
    "StoreError",
    # application
    "TokenService",
    # adapters
    "InMemoryTokenStore",
    "RedisTokenStore",
    # wiring
    "TokenSettings",
    "settings_from_env",
    "create_token_service",
    "create_token_service_from_env",
    "configure_logging",
    "get_logger",
]
