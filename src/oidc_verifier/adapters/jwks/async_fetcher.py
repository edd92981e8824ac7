from __future__ import annotations

import logging
from typing import Optional

import httpx

from .parser import parse_key_set
from ...domain.entities import KeySet
from ...domain.exceptions import FetchFailedError
from ...domain.ports import AsyncKeyFetcher

logger = logging.getLogger(__name__)


class AsyncJWKSKeyFetcher(AsyncKeyFetcher):
    """
    Async KeyFetcher backed by httpx.

    A client passed in by the caller is left open; one created here is
    closed after the fetch.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        verify_ssl: bool = True,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._verify_ssl = verify_ssl

    async def fetch(self, url: str) -> KeySet:
        if not url:
            raise FetchFailedError("certs url is empty")

        if self._client is not None:
            response = await self._get(self._client, url)
        else:
            async with httpx.AsyncClient(verify=self._verify_ssl, timeout=self._timeout) as client:
                response = await self._get(client, url)

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchFailedError(f"certs response is not valid JSON: {exc}") from exc

        key_set = parse_key_set(body)
        logger.info("Fetched %d signing key(s) from %s", len(key_set), url)
        return key_set

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            resp = await client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchFailedError(
                f"certs request returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchFailedError(f"certs request failed: {exc}") from exc
        return resp
