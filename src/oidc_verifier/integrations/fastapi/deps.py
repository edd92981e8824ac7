from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials

from .security import (
    ACCESS_JWT_COOKIE,
    ACCESS_JWT_HEADER,
    bearer_scheme,
    extract_token_from_request,
    not_authenticated,
)
from ...application.verifier import OIDCTokenVerifier
from ...domain.entities import TokenClaims

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FastAPITokenAuth:
    """
    FastAPI integration for oidc_verifier.

    REJECTED and every FAILED outcome become the same 401 so clients
    cannot tell a forged token from an expired one. The outcome tag is
    only logged.
    """

    verifier: OIDCTokenVerifier
    header_name: str = ACCESS_JWT_HEADER
    cookie_name: str = ACCESS_JWT_COOKIE

    def _verify(self, token: str) -> TokenClaims | None:
        outcome = self.verifier.verify(token)
        if outcome.is_valid:
            return outcome.claims
        logger.info(
            "Denied request: status=%s kind=%s reason=%s",
            outcome.status.value,
            outcome.error_kind.value if outcome.error_kind else None,
            outcome.reason,
        )
        return None

    async def get_current_claims(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenClaims:
        """Dependency: Require a valid token."""
        token = extract_token_from_request(
            request, credentials, self.header_name, self.cookie_name
        )
        claims = self._verify(token)
        if claims is None:
            raise not_authenticated()
        return claims

    async def get_optional_claims(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenClaims | None:
        """Dependency: Optional authentication."""
        try:
            token = extract_token_from_request(
                request, credentials, self.header_name, self.cookie_name
            )
        except HTTPException:
            # no token anywhere -> anonymous
            return None
        return self._verify(token)
