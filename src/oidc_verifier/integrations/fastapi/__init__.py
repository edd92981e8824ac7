from __future__ import annotations

from .deps import FastAPITokenAuth
from .security import ACCESS_JWT_COOKIE, ACCESS_JWT_HEADER, bearer_scheme, extract_token_from_request
from ..common.settings import VerifierSettings
from ..common.verifier_factory import create_verifier, create_verifier_async


def create_fastapi_auth(settings: VerifierSettings) -> FastAPITokenAuth:
    """
    High-level helper for FastAPI apps:

    - Fetches the key set and builds an OIDCTokenVerifier
    - Wraps it in FastAPITokenAuth, exposing dependencies like:

        fastapi_auth.get_current_claims
        fastapi_auth.get_optional_claims
    """
    return FastAPITokenAuth(verifier=create_verifier(settings))


async def create_fastapi_auth_async(settings: VerifierSettings) -> FastAPITokenAuth:
    """Same as create_fastapi_auth, for use inside a lifespan handler."""
    return FastAPITokenAuth(verifier=await create_verifier_async(settings))


__all__ = [
    "FastAPITokenAuth",
    "ACCESS_JWT_HEADER",
    "ACCESS_JWT_COOKIE",
    "bearer_scheme",
    "extract_token_from_request",
    "create_fastapi_auth",
    "create_fastapi_auth_async",
]
