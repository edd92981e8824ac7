from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import jwt
from jwt.exceptions import PyJWTError

from ...domain.entities import KeySet
from ...domain.exceptions import FetchFailedError
from ...domain.value_objects import SigningKey

logger = logging.getLogger(__name__)

# Symmetric keys have no business in a published key set.
_UNSUPPORTED_KEY_TYPES = frozenset({"oct"})


def parse_key_set(document: Any) -> KeySet:
    """
    Turn a decoded JWKS document into a KeySet.

    Unknown fields are ignored. Individual entries that cannot be used
    for signature verification are skipped with a warning.

    Raises:
        FetchFailedError if the document has no `keys` list, or if none
        of its entries is usable.
    """
    if not isinstance(document, Mapping):
        raise FetchFailedError("key set document is not a JSON object")

    entries = document.get("keys")
    if not isinstance(entries, list):
        raise FetchFailedError("key set document has no 'keys' list")

    keys: List[SigningKey] = []
    for index, entry in enumerate(entries):
        key = _parse_entry(index, entry)
        if key is not None:
            keys.append(key)

    if not keys:
        raise FetchFailedError("key set contains no usable keys")

    return KeySet(keys)


def _parse_entry(index: int, entry: Any) -> Optional[SigningKey]:
    if not isinstance(entry, Mapping):
        logger.warning("Skipping JWKS entry #%d: not a JSON object", index)
        return None

    kid = entry.get("kid")
    if not isinstance(kid, str) or not kid:
        logger.warning("Skipping JWKS entry #%d: missing 'kid'", index)
        return None

    use = entry.get("use")
    if use is not None and use != "sig":
        logger.warning("Skipping JWKS key %r: use=%r is not 'sig'", kid, use)
        return None

    kty = entry.get("kty")
    if kty in _UNSUPPORTED_KEY_TYPES:
        logger.warning("Skipping JWKS key %r: unsupported key type %r", kid, kty)
        return None

    alg = entry.get("alg")
    if isinstance(alg, str) and (alg.lower() == "none" or alg.upper().startswith("HS")):
        logger.warning("Skipping JWKS key %r: algorithm %r cannot verify signatures", kid, alg)
        return None

    if "d" in entry:
        logger.warning("Skipping JWKS key %r: contains private key material", kid)
        return None

    try:
        jwk = jwt.PyJWK(dict(entry))
    except (PyJWTError, ValueError, TypeError, NotImplementedError) as exc:
        logger.warning("Skipping JWKS key %r: %s", kid, exc)
        return None

    return SigningKey(
        key_id=kid,
        key_type=jwk.key_type,
        algorithm=jwk.algorithm_name,
        material=jwk.key,
        use=use,
    )
