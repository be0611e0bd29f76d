from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from ...application.service import TokenService
from ...domain.entities import TokenRecord
from ...domain.exceptions import StoreError
from .security import DEFAULT_COOKIE_NAME, bearer_scheme, extract_token_from_request

# One message for every invalid token, whatever the reason
INVALID_TOKEN_DETAIL = "Invalid or expired token"


@dataclass(slots=True)
class FastAPITokenAuth:
    """
    FastAPI integration for pkg_tokens.

    Resolves the request's bearer token through TokenService and injects
    the TokenRecord. What the holder may do with it is up to the app.
    """

    service: TokenService
    cookie_name: str = DEFAULT_COOKIE_NAME

    # ------------------------------------------------------------------ #
    # Base dependencies
    # ------------------------------------------------------------------ #

    async def get_current_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenRecord:
        """Dependency: require a valid token (401 if not, 503 if the store is down)."""
        token = extract_token_from_request(request, credentials, self.cookie_name)
        if token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            record = self.service.lookup(token)
        except StoreError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Token store unavailable",
            ) from exc

        if record is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=INVALID_TOKEN_DETAIL,
                headers={"WWW-Authenticate": "Bearer"},
            )
        return record

    async def get_optional_token(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenRecord | None:
        """Dependency: resolve a token if present; anonymous otherwise."""
        token = extract_token_from_request(request, credentials, self.cookie_name)
        if token is None:
            return None

        try:
            return self.service.lookup(token)
        except StoreError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Token store unavailable",
            ) from exc


"""

from pkg_tokens.integrations.fastapi import create_fastapi_token_auth
from pkg_tokens.config import settings_from_env

token_auth = create_fastapi_token_auth(settings_from_env())

get_current_token = token_auth.get_current_token
get_optional_token = token_auth.get_optional_token


@app.get("/me")
async def me(record: TokenRecord = Depends(get_current_token)):
    return {"token_id": str(record.token_id), "state": record.state}

"""
