# tests/test_verifier.py
import asyncio
import base64
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import NOW, make_token, public_jwk
from oidc_verifier import (
    AllowedAudiences,
    ErrorKind,
    FetchFailedError,
    InitError,
    KeySet,
    OIDCTokenVerifier,
    OutcomeStatus,
)
from oidc_verifier.adapters.jwks.parser import parse_key_set


class StaticFetcher:
    def __init__(self, key_set=None, exc=None):
        self.key_set = key_set
        self.exc = exc
        self.urls = []

    def fetch(self, url):
        self.urls.append(url)
        if self.exc is not None:
            raise self.exc
        return self.key_set


class AsyncStaticFetcher(StaticFetcher):
    async def fetch(self, url):
        return StaticFetcher.fetch(self, url)


def _b64(data):
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def _unsigned(header, payload):
    return f"{_b64(header)}.{_b64(payload)}.c2ln"


@pytest.fixture
def verifier(key_set, clock):
    return OIDCTokenVerifier.create(
        "https://idp.example.com/certs",
        {"svc1"},
        fetcher=StaticFetcher(key_set),
        clock=clock,
    )


# --- End-to-end scenarios ------------------------------------------------


def test_valid_token(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, claims))

    assert outcome.status is OutcomeStatus.VALID
    assert outcome.claims.audience == ("svc1",)
    assert outcome.claims.expires_at == NOW + 3600
    assert outcome.claims.subject == "user-123"
    assert outcome.claims.email == "user@example.com"
    assert outcome.claims.get("iat") == NOW


def test_signed_with_other_key_fails(verifier, other_private, claims):
    outcome = verifier.verify(make_token(other_private, claims, kid="k1"))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error_kind is ErrorKind.CLAIMS_DECODE_ERROR
    assert outcome.claims is None


def test_missing_kid_fails_header_decode(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, claims, kid=None))

    assert outcome.error_kind is ErrorKind.HEADER_DECODE_ERROR
    assert outcome.reason == "missing key id"


# --- Signature before claims --------------------------------------------


def test_bad_signature_never_exposes_claims(verifier, other_private, claims):
    # audience and expiration would both pass
    outcome = verifier.verify(make_token(other_private, claims))

    assert outcome.error_kind is ErrorKind.CLAIMS_DECODE_ERROR
    assert outcome.claims is None
    assert not outcome


def test_tampered_payload_fails(verifier, k1_private, claims):
    header, _, signature = make_token(k1_private, dict(claims, aud=["other"])).split(".")
    forged = f"{header}.{_b64(claims)}.{signature}"

    outcome = verifier.verify(forged)

    assert outcome.error_kind is ErrorKind.CLAIMS_DECODE_ERROR


def test_alg_none_is_refused(verifier, claims):
    token = make_token(None, claims, kid="k1", algorithm="none")

    assert verifier.verify(token).error_kind is ErrorKind.CLAIMS_DECODE_ERROR


def test_algorithm_is_pinned_to_key(verifier, k1_private, claims):
    # RS256 token claiming the EC key
    token = make_token(k1_private, claims, kid="ec1")

    assert verifier.verify(token).error_kind is ErrorKind.CLAIMS_DECODE_ERROR


def test_ec_key(verifier, ec_private, claims):
    token = make_token(ec_private, claims, kid="ec1", algorithm="ES256")

    assert verifier.verify(token).is_valid


@pytest.mark.parametrize(
    "changes",
    [
        {"aud": None},
        {"exp": None},
        {"exp": "tomorrow"},
        {"aud": [1, 2]},
    ],
)
def test_bad_claim_schema_fails(verifier, k1_private, claims, changes):
    payload = dict(claims)
    for name, value in changes.items():
        if value is None:
            payload.pop(name)
        else:
            payload[name] = value

    outcome = verifier.verify(make_token(k1_private, payload))

    assert outcome.error_kind is ErrorKind.CLAIMS_DECODE_ERROR


# --- Header / key lookup -------------------------------------------------


@pytest.mark.parametrize("token", ["", "garbage", "a.b", "!!!.@@@.###", "\ud800.a.b"])
def test_malformed_token_fails_header_decode(verifier, token):
    assert verifier.verify(token).error_kind is ErrorKind.HEADER_DECODE_ERROR


def test_non_string_kid_fails_header_decode(verifier, claims):
    token = _unsigned({"alg": "RS256", "kid": 7}, claims)

    assert verifier.verify(token).error_kind is ErrorKind.HEADER_DECODE_ERROR


def test_unknown_kid_is_key_not_found(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, claims, kid="rotated-away"))

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error_kind is ErrorKind.KEY_NOT_FOUND


def test_unknown_kid_with_garbage_signature(verifier, claims):
    token = _unsigned({"alg": "RS256", "kid": "invented"}, claims)

    assert verifier.verify(token).error_kind is ErrorKind.KEY_NOT_FOUND


# --- Audience policy ------------------------------------------------------


def test_audience_any_match_is_enough(key_set, clock, k1_private, claims):
    verifier = OIDCTokenVerifier(
        certs_url="https://idp.example.com/certs",
        key_set=key_set,
        allowed_audiences=AllowedAudiences({"A", "B"}),
        clock=clock,
    )

    assert verifier.verify(make_token(k1_private, dict(claims, aud=["B", "C"]))).is_valid
    assert verifier.verify(make_token(k1_private, dict(claims, aud="A"))).is_valid

    outcome = verifier.verify(make_token(k1_private, dict(claims, aud=["C"])))
    assert outcome.status is OutcomeStatus.REJECTED
    assert outcome.error_kind is None


def test_empty_audience_config_rejects_everything(key_set, clock, k1_private, other_private, claims):
    verifier = OIDCTokenVerifier.create(
        "https://idp.example.com/certs", [], fetcher=StaticFetcher(key_set), clock=clock
    )

    assert verifier.verify(make_token(k1_private, claims)).status is OutcomeStatus.REJECTED
    # signature is checked before audience policy, so a forgery still FAILS
    forged = verifier.verify(make_token(other_private, claims))
    assert forged.status is OutcomeStatus.FAILED
    assert forged.error_kind is ErrorKind.CLAIMS_DECODE_ERROR


# --- Expiration policy ----------------------------------------------------


def test_expiring_now_is_still_valid(verifier, k1_private, claims):
    assert verifier.verify(make_token(k1_private, dict(claims, exp=NOW))).is_valid


def test_expired_one_second_ago_is_rejected(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, dict(claims, exp=NOW - 1)))

    assert outcome.status is OutcomeStatus.REJECTED
    assert outcome.claims is None


def test_audience_checked_before_expiration(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, dict(claims, aud=["x"], exp=NOW - 100)))

    assert outcome.is_rejected
    assert "audience" in outcome.reason


def test_clock_is_read_once_at_expiration_check(key_set, k1_private, claims):
    reads = []

    def counting_clock():
        reads.append(1)
        return NOW + 0.9

    verifier = OIDCTokenVerifier(
        certs_url="u", key_set=key_set, allowed_audiences=AllowedAudiences("svc1"), clock=counting_clock
    )

    assert verifier.verify(make_token(k1_private, claims)).is_valid
    assert len(reads) == 1

    verifier.verify("garbage")
    verifier.verify(make_token(k1_private, dict(claims, aud="nope")))
    assert len(reads) == 1


def test_default_clock_is_wall_time(key_set, k1_private, live_claims):
    verifier = OIDCTokenVerifier(
        certs_url="u", key_set=key_set, allowed_audiences=AllowedAudiences("svc1")
    )

    assert verifier.verify(make_token(k1_private, live_claims)).is_valid
    assert verifier.verify(make_token(k1_private, dict(live_claims, exp=1))).is_rejected


# --- Construction ---------------------------------------------------------


def test_create_fetches_once(key_set):
    fetcher = StaticFetcher(key_set)
    verifier = OIDCTokenVerifier.create("https://idp.example.com/certs", ["svc1"], fetcher=fetcher)

    assert fetcher.urls == ["https://idp.example.com/certs"]
    assert verifier.key_set is key_set
    assert verifier.allowed_audiences == AllowedAudiences({"svc1"})


def test_create_propagates_fetch_failure():
    fetcher = StaticFetcher(exc=FetchFailedError("certs request failed: boom"))

    with pytest.raises(InitError) as excinfo:
        OIDCTokenVerifier.create("https://idp.example.com/certs", ["svc1"], fetcher=fetcher)

    assert isinstance(excinfo.value, FetchFailedError)
    assert excinfo.value.reason == "certs request failed: boom"


def test_acreate(key_set, clock, k1_private, claims):
    fetcher = AsyncStaticFetcher(key_set)
    verifier = asyncio.run(
        OIDCTokenVerifier.acreate("https://idp.example.com/certs", {"svc1"}, fetcher=fetcher, clock=clock)
    )

    assert fetcher.urls == ["https://idp.example.com/certs"]
    assert verifier.verify(make_token(k1_private, claims)).is_valid


def test_refresh_returns_new_verifier(key_set, clock, k1_private, other_private, claims):
    verifier = OIDCTokenVerifier.create("u", {"svc1"}, fetcher=StaticFetcher(key_set), clock=clock)
    rotated = KeySet(parse_key_set({"keys": [public_jwk(other_private, "k2")]}))
    token = make_token(other_private, claims, kid="k2")

    refreshed = verifier.refresh(fetcher=StaticFetcher(rotated))

    assert refreshed is not verifier
    assert refreshed.verify(token).is_valid
    assert verifier.verify(token).error_kind is ErrorKind.KEY_NOT_FOUND
    assert refreshed.allowed_audiences == verifier.allowed_audiences


def test_verifier_is_immutable(verifier):
    with pytest.raises(AttributeError):
        verifier.key_set = KeySet()


def test_concurrent_verification(verifier, k1_private, other_private, claims):
    good = make_token(k1_private, claims)
    bad = make_token(other_private, claims)
    tokens = [good, bad] * 50

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(verifier.verify, tokens))

    assert [o.is_valid for o in outcomes] == [True, False] * 50


def test_non_string_subject_passes_through(verifier, k1_private, claims):
    outcome = verifier.verify(make_token(k1_private, dict(claims, sub=12345)))

    assert outcome.is_valid
    assert outcome.claims.get("sub") == 12345
    assert outcome.claims.subject is None
