from __future__ import annotations

from typing import Any, Mapping, Protocol

from .entities import KeySet
from .value_objects import SigningKey


class KeyFetcher(Protocol):
    """
    Port for obtaining the provider's key set.

    Implementations live in the adapters layer (e.g. requests-based JWKS fetcher).
    """

    def fetch(self, url: str) -> KeySet:
        """
        Retrieve and parse the key set published at `url`.

        Raises:
          - FetchFailedError on transport or document errors
        """
        ...


class AsyncKeyFetcher(Protocol):
    """Awaitable variant of KeyFetcher for asyncio hosts."""

    async def fetch(self, url: str) -> KeySet:
        ...


class TokenDecoder(Protocol):
    """
    Port for the signature-verification capability.
    """

    def read_header(self, token: str) -> Mapping[str, Any]:
        """
        Decode the header segment without verifying anything.

        Raises:
          - HeaderDecodeError
        """
        ...

    def decode(self, token: str, key: SigningKey) -> Mapping[str, Any]:
        """
        Verify the token signature with `key` and return the payload.

        Must not check audience or expiration; that is policy and belongs
        to the caller.

        Raises:
          - ClaimsDecodeError
        """
        ...
