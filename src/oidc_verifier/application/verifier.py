from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .use_cases.verify_token import VerifyTokenUseCase
from ..adapters.jwks.async_fetcher import AsyncJWKSKeyFetcher
from ..adapters.jwks.fetcher import JWKSKeyFetcher
from ..adapters.pyjwt.token_decoder import PyJWTTokenDecoder
from ..domain.entities import KeySet, VerificationOutcome
from ..domain.ports import AsyncKeyFetcher, KeyFetcher, TokenDecoder
from ..domain.value_objects import AllowedAudiences

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OIDCTokenVerifier:
    """
    Verifies bearer tokens against one provider's key set.

    Build it with `create` (or `acreate` from async code): the key set is
    fetched exactly once and fixed for the lifetime of the instance.
    After that `verify` is a pure function of the token and the clock and
    is safe to call from many threads at once.

    Example:

        verifier = OIDCTokenVerifier.create(
            "https://example.cloudflareaccess.com/cdn-cgi/access/certs",
            {"my-app-aud"},
        )
        outcome = verifier.verify(token)
        if not outcome:
            deny()
    """

    certs_url: str
    key_set: KeySet
    allowed_audiences: AllowedAudiences
    token_decoder: TokenDecoder = field(default_factory=PyJWTTokenDecoder)
    clock: Callable[[], float] = field(default=time.time)
    _use_case: VerifyTokenUseCase = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.allowed_audiences.is_empty:
            logger.warning(
                "Verifier for %s has no allowed audiences; every token will be rejected",
                self.certs_url,
            )
        object.__setattr__(
            self,
            "_use_case",
            VerifyTokenUseCase(
                key_set=self.key_set,
                allowed_audiences=self.allowed_audiences,
                token_decoder=self.token_decoder,
                clock=self.clock,
            ),
        )

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def create(
        cls,
        certs_url: str,
        allowed_audiences: Iterable[str] | AllowedAudiences,
        *,
        fetcher: Optional[KeyFetcher] = None,
        token_decoder: Optional[TokenDecoder] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "OIDCTokenVerifier":
        """
        Fetch the key set at `certs_url` and build a ready verifier.

        Raises:
            FetchFailedError (an InitError) if no usable key set could be
            obtained. There is no partially-initialized verifier.
        """
        key_set = (fetcher or JWKSKeyFetcher()).fetch(certs_url)
        return cls._build(certs_url, key_set, allowed_audiences, token_decoder, clock)

    @classmethod
    async def acreate(
        cls,
        certs_url: str,
        allowed_audiences: Iterable[str] | AllowedAudiences,
        *,
        fetcher: Optional[AsyncKeyFetcher] = None,
        token_decoder: Optional[TokenDecoder] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "OIDCTokenVerifier":
        """Async counterpart of `create`."""
        key_set = await (fetcher or AsyncJWKSKeyFetcher()).fetch(certs_url)
        return cls._build(certs_url, key_set, allowed_audiences, token_decoder, clock)

    @classmethod
    def _build(
        cls,
        certs_url: str,
        key_set: KeySet,
        allowed_audiences: Iterable[str] | AllowedAudiences,
        token_decoder: Optional[TokenDecoder],
        clock: Optional[Callable[[], float]],
    ) -> "OIDCTokenVerifier":
        if not isinstance(allowed_audiences, AllowedAudiences):
            allowed_audiences = AllowedAudiences(allowed_audiences)
        return cls(
            certs_url=certs_url,
            key_set=key_set,
            allowed_audiences=allowed_audiences,
            token_decoder=token_decoder or PyJWTTokenDecoder(),
            clock=clock or time.time,
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str) -> VerificationOutcome:
        return self._use_case.execute(token)

    # ------------------------------------------------------------------ #
    # Key rotation
    # ------------------------------------------------------------------ #

    def refresh(self, fetcher: Optional[KeyFetcher] = None) -> "OIDCTokenVerifier":
        """
        Fetch the key set again and return a NEW verifier using it.

        This instance is left untouched; callers swap the reference.

        Raises:
            FetchFailedError
        """
        return self.create(
            self.certs_url,
            self.allowed_audiences,
            fetcher=fetcher,
            token_decoder=self.token_decoder,
            clock=self.clock,
        )

    async def arefresh(self, fetcher: Optional[AsyncKeyFetcher] = None) -> "OIDCTokenVerifier":
        return await self.acreate(
            self.certs_url,
            self.allowed_audiences,
            fetcher=fetcher,
            token_decoder=self.token_decoder,
            clock=self.clock,
        )
