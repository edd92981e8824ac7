"""
oidc_verifier

Verifies OIDC-style bearer tokens against an identity provider's
published key set (JWKS), fetched once when the verifier is built.
"""

__version__ = "0.1.0"

from .domain.constants import ErrorKind, OutcomeStatus
from .domain.entities import KeySet, TokenClaims, VerificationOutcome
from .domain.exceptions import (
    InitError,
    FetchFailedError,
    HeaderDecodeError,
    ClaimsDecodeError,
)
from .domain.value_objects import SigningKey, AllowedAudiences
from .domain.ports import KeyFetcher, AsyncKeyFetcher, TokenDecoder

from .application.use_cases.verify_token import VerifyTokenUseCase
from .application.verifier import OIDCTokenVerifier

# Default adapters
from .adapters.jwks.parser import parse_key_set
from .adapters.jwks.fetcher import JWKSKeyFetcher
from .adapters.jwks.async_fetcher import AsyncJWKSKeyFetcher
from .adapters.pyjwt.token_decoder import PyJWTTokenDecoder

from .integrations.common.settings import VerifierSettings
from .integrations.common.env import settings_from_env
from .integrations.common.verifier_factory import (
    create_verifier,
    create_verifier_async,
    create_verifier_from_env,
)

__all__ = [
    "__version__",
    # domain core
    "ErrorKind",
    "OutcomeStatus",
    "KeySet",
    "SigningKey",
    "AllowedAudiences",
    "TokenClaims",
    "VerificationOutcome",
    "KeyFetcher",
    "AsyncKeyFetcher",
    "TokenDecoder",
    # exceptions
    "InitError",
    "FetchFailedError",
    "HeaderDecodeError",
    "ClaimsDecodeError",
    # use cases
    "VerifyTokenUseCase",
    "OIDCTokenVerifier",
    # adapters
    "parse_key_set",
    "JWKSKeyFetcher",
    "AsyncJWKSKeyFetcher",
    "PyJWTTokenDecoder",
    # wiring
    "VerifierSettings",
    "settings_from_env",
    "create_verifier",
    "create_verifier_async",
    "create_verifier_from_env",
]
