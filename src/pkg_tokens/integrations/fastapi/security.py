from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Expose this so apps can plug it into dependencies if they want OpenAPI security
bearer_scheme = HTTPBearer(auto_error=False)

DEFAULT_COOKIE_NAME = "access_token"


def extract_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> Optional[str]:
    """
    Find the wire token on a request, in order:

      1. HTTPBearer credentials resolved by FastAPI
      2. raw `Authorization: Bearer <token>` header
      3. the `cookie_name` cookie

    Returns None when there is no token anywhere.
    """
    if credentials is not None:
        token = (credentials.credentials or "").strip()
        if token:
            return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()
        if token:
            return token

    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token.strip() or None

    return None
