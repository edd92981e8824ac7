from __future__ import annotations

import logging
from typing import Optional

import requests
from requests import Session

from .parser import parse_key_set
from ...domain.entities import KeySet
from ...domain.exceptions import FetchFailedError
from ...domain.ports import KeyFetcher

logger = logging.getLogger(__name__)


class JWKSKeyFetcher(KeyFetcher):
    """
    Adapter implementing KeyFetcher port using requests.

    One GET per `fetch` call: no retry, no caching. Timeouts are the
    HTTP client's concern and are passed straight through.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        timeout: float = 10.0,
        verify_ssl: bool = True,
    ) -> None:
        self._session = session or Session()
        self._timeout = timeout
        self._verify_ssl = verify_ssl

    def fetch(self, url: str) -> KeySet:
        if not url:
            raise FetchFailedError("certs url is empty")

        try:
            response = self._session.get(url, timeout=self._timeout, verify=self._verify_ssl)
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise FetchFailedError(
                f"certs request returned HTTP {exc.response.status_code}"
            ) from exc
        except requests.RequestException as exc:
            raise FetchFailedError(f"certs request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchFailedError(f"certs response is not valid JSON: {exc}") from exc

        key_set = parse_key_set(body)
        logger.info("Fetched %d signing key(s) from %s", len(key_set), url)
        return key_set
