from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.permission import BasePermission
from strawberry.types import Info

from ...application.service import TokenService
from ...config.settings import TokenSettings
from ...domain.entities import TokenRecord
from ...domain.exceptions import StoreError
from ...domain.ports import TokenStore
from ..common.service_factory import create_token_service


# --------------------------------------------------------------------- #
# Context type used by Strawberry
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryTokenContext:
    """
    Default context type for Strawberry GraphQL.

    `token` is the resolved TokenRecord, or None for anonymous requests.
    """
    request: Request
    token: Optional[TokenRecord] = None
    extra: Any = None  # host app can put UoW, services, etc. here if desired


def _extract_token_from_request(request: Request, cookie_name: str) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token

    return None


# --------------------------------------------------------------------- #
# Main integration: StrawberryTokenAuth
# --------------------------------------------------------------------- #

@dataclass(slots=True)
class StrawberryTokenAuth:
    """
    Strawberry GraphQL integration for pkg_tokens.

    Responsibilities:
      - provide a `context_getter` for Strawberry's GraphQLRouter
      - provide a permission class requiring a resolved token

    Store outages surface as a GraphQL error even in optional mode; they
    are never reported as "not authenticated".
    """

    service: TokenService
    cookie_name: str = "access_token"

    def make_context_getter(
        self,
        *,
        optional: bool = True,
        extra_factory: Optional[Callable[[Request, Optional[TokenRecord]], Any]] = None,
    ):
        """
        Build an async function compatible with:

            strawberry.fastapi.GraphQLRouter(context_getter=...)

        Args:
            optional:
                - True:   missing / invalid tokens become `token=None`
                - False:  they become GraphQL errors
            extra_factory:
                - Optional callable: (request, token) -> Any, stored on context.extra
        """

        async def _context_getter(request: Request) -> StrawberryTokenContext:
            wire = _extract_token_from_request(request, self.cookie_name)

            record: Optional[TokenRecord] = None
            if wire:
                try:
                    record = self.service.lookup(wire)
                except StoreError as exc:
                    raise GraphQLError("Token store unavailable") from exc

            if record is None and not optional:
                raise GraphQLError("Not authenticated")

            extra = extra_factory(request, record) if extra_factory else None
            return StrawberryTokenContext(request=request, token=record, extra=extra)

        return _context_getter

    def require_token(self) -> Type[BasePermission]:
        """
        Permission: the request must carry a valid token.

        Example:

            RequireToken = strawberry_auth.require_token()

            @strawberry.field(permission_classes=[RequireToken])
            def profile(self, info: Info) -> Profile:
                ...
        """

        class _RequireToken(BasePermission):
            message = "Not authenticated"

            def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
                ctx: StrawberryTokenContext = info.context
                return ctx.token is not None

        return _RequireToken


def create_strawberry_token_auth(
    settings: TokenSettings,
    *,
    store: Optional[TokenStore] = None,
    cookie_name: str = "access_token",
) -> StrawberryTokenAuth:
    """
    Convenience helper:

        strawberry_auth = create_strawberry_token_auth(settings_from_env())

    This builds the TokenService from settings and wraps it for Strawberry.
    """
    service = create_token_service(settings, store=store)
    return StrawberryTokenAuth(service=service, cookie_name=cookie_name)
