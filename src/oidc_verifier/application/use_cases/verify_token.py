from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from ...domain.constants import ErrorKind
from ...domain.entities import KeySet, TokenClaims, VerificationOutcome
from ...domain.exceptions import ClaimsDecodeError, HeaderDecodeError
from ...domain.ports import TokenDecoder
from ...domain.value_objects import AllowedAudiences

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerifyTokenUseCase:
    """
    Application use case:
    - Read the token header and find the signing key by `kid`
    - Verify the signature via the TokenDecoder port
    - Apply audience and expiration policy to the verified claims

    Never raises for bad input: every exit is a VerificationOutcome.
    Holds only immutable state, so one instance can serve concurrent
    callers.
    """

    key_set: KeySet
    allowed_audiences: AllowedAudiences
    token_decoder: TokenDecoder
    clock: Callable[[], float] = field(default=time.time)

    def execute(self, token: str) -> VerificationOutcome:
        outcome = self._verify(token)
        if not outcome.is_valid:
            logger.debug(
                "Token not accepted: status=%s kind=%s reason=%s",
                outcome.status.value,
                outcome.error_kind.value if outcome.error_kind else None,
                outcome.reason,
            )
        return outcome

    def _verify(self, token: str) -> VerificationOutcome:
        # ---- 1. Header ----------------------------------------------------
        try:
            header = self.token_decoder.read_header(token)
        except HeaderDecodeError as exc:
            return VerificationOutcome.failed(ErrorKind.HEADER_DECODE_ERROR, str(exc))

        # ---- 2. Key id ----------------------------------------------------
        kid = header.get("kid")
        if kid is None:
            return VerificationOutcome.failed(ErrorKind.HEADER_DECODE_ERROR, "missing key id")
        if not isinstance(kid, str):
            return VerificationOutcome.failed(ErrorKind.HEADER_DECODE_ERROR, "key id is not a string")

        # ---- 3. Key lookup ------------------------------------------------
        key = self.key_set.lookup(kid)
        if key is None:
            return VerificationOutcome.failed(ErrorKind.KEY_NOT_FOUND, f"no key with id {kid!r}")

        # ---- 4. Signature + payload schema --------------------------------
        # Nothing from the payload is looked at before this succeeds.
        try:
            payload = self.token_decoder.decode(token, key)
            claims = TokenClaims.from_payload(payload)
        except ClaimsDecodeError as exc:
            return VerificationOutcome.failed(ErrorKind.CLAIMS_DECODE_ERROR, str(exc))
        except ValueError as exc:
            return VerificationOutcome.failed(ErrorKind.CLAIMS_DECODE_ERROR, f"invalid claims: {exc}")

        # ---- 5. Audience --------------------------------------------------
        if not self.allowed_audiences.intersects(claims.audience):
            return VerificationOutcome.rejected(f"no allowed audience in {list(claims.audience)}")

        # ---- 6. Expiration ------------------------------------------------
        now = int(self.clock())
        if claims.expires_at < now:
            return VerificationOutcome.rejected(f"token expired at {claims.expires_at}")

        return VerificationOutcome.valid(claims)
