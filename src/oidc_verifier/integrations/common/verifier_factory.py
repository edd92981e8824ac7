from __future__ import annotations

from ...adapters.jwks.async_fetcher import AsyncJWKSKeyFetcher
from ...adapters.jwks.fetcher import JWKSKeyFetcher
from ...application.verifier import OIDCTokenVerifier
from .env import settings_from_env
from .settings import VerifierSettings


def create_verifier(settings: VerifierSettings) -> OIDCTokenVerifier:
    """
    High-level factory: VerifierSettings -> OIDCTokenVerifier.

    - builds a JWKSKeyFetcher with the configured timeout / TLS options
    - fetches the key set once and returns a ready verifier

    Raises:
        FetchFailedError
    """
    fetcher = JWKSKeyFetcher(
        timeout=settings.fetch_timeout,
        verify_ssl=settings.verify_ssl,
    )
    return OIDCTokenVerifier.create(
        settings.certs_url_clean,
        settings.allowed_audiences,
        fetcher=fetcher,
    )


async def create_verifier_async(settings: VerifierSettings) -> OIDCTokenVerifier:
    fetcher = AsyncJWKSKeyFetcher(
        timeout=settings.fetch_timeout,
        verify_ssl=settings.verify_ssl,
    )
    return await OIDCTokenVerifier.acreate(
        settings.certs_url_clean,
        settings.allowed_audiences,
        fetcher=fetcher,
    )


def create_verifier_from_env() -> OIDCTokenVerifier:
    """Convenience wrapper using env-configured settings."""
    return create_verifier(settings_from_env())
