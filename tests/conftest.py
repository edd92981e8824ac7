# tests/conftest.py
import json
import time

import jwt
import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm

from oidc_verifier.adapters.jwks.parser import parse_key_set


NOW = 1_700_000_000


def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def public_jwk(private_key, kid, **extra):
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        jwk = json.loads(ECAlgorithm.to_jwk(private_key.public_key()))
        jwk.setdefault("alg", "ES256")
    else:
        jwk = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
        jwk.setdefault("alg", "RS256")
    jwk["kid"] = kid
    jwk["use"] = "sig"
    jwk.update(extra)
    return jwk


def make_token(private_key, payload, kid="k1", algorithm="RS256", headers=None):
    hdrs = dict(headers or {})
    if kid is not None:
        hdrs["kid"] = kid
    return jwt.encode(payload, private_key, algorithm=algorithm, headers=hdrs)


@pytest.fixture(scope="session")
def k1_private():
    return rsa_private_key()


@pytest.fixture(scope="session")
def other_private():
    return rsa_private_key()


@pytest.fixture(scope="session")
def ec_private():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def jwks_document(k1_private, ec_private):
    return {
        "keys": [
            public_jwk(k1_private, "k1"),
            public_jwk(ec_private, "ec1"),
        ]
    }


@pytest.fixture
def key_set(jwks_document):
    return parse_key_set(jwks_document)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def claims():
    return {
        "sub": "user-123",
        "email": "user@example.com",
        "iss": "https://example.cloudflareaccess.com",
        "aud": ["svc1"],
        "exp": NOW + 3600,
        "iat": NOW,
    }


@pytest.fixture
def live_claims():
    now = int(time.time())
    return {"sub": "user-123", "aud": ["svc1"], "exp": now + 3600, "iat": now}


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._body


class FakeSession:
    """Stand-in for requests.Session recording every GET."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response
