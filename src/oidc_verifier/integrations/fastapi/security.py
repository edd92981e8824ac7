from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Optional: only consulted after the Access header and cookie
bearer_scheme = HTTPBearer(auto_error=False)

# Cloudflare Access forwards the application token in this header and
# sets it in this cookie for browser sessions.
ACCESS_JWT_HEADER = "Cf-Access-Jwt-Assertion"
ACCESS_JWT_COOKIE = "CF_Authorization"


def not_authenticated() -> HTTPException:
    """The single 401 every rejected or unverifiable token maps to."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _non_empty(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def extract_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    header_name: str = ACCESS_JWT_HEADER,
    cookie_name: str = ACCESS_JWT_COOKIE,
) -> str:
    """
    Find the identity token the access proxy attached to `request`.

    Sources, first hit wins:

      1. the `Cf-Access-Jwt-Assertion` header (set by the proxy, cannot be
         overridden by the browser)
      2. the `CF_Authorization` cookie
      3. an `Authorization: Bearer` token, for service-to-service calls

    Raises HTTPException(401) if none carries a token.
    """
    token = _non_empty(request.headers.get(header_name))
    if token:
        return token

    token = _non_empty(request.cookies.get(cookie_name))
    if token:
        return token

    if credentials is not None:
        token = _non_empty(credentials.credentials)
    else:
        scheme, _, param = request.headers.get("Authorization", "").partition(" ")
        token = _non_empty(param) if scheme.lower() == "bearer" else None
    if token:
        return token

    raise not_authenticated()
