from .auth import (
    StrawberryTokenAuth,
    StrawberryTokenContext,
    create_strawberry_token_auth,
)

__all__ = [
    "StrawberryTokenAuth",
    "StrawberryTokenContext",
    "create_strawberry_token_auth",
]
