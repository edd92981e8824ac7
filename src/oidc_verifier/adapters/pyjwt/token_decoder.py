from typing import Any, Mapping

import jwt
from jwt.exceptions import PyJWTError

from ...domain.exceptions import ClaimsDecodeError, HeaderDecodeError
from ...domain.ports import TokenDecoder
from ...domain.value_objects import SigningKey


class PyJWTTokenDecoder(TokenDecoder):
    """
    Adapter implementing TokenDecoder port using PyJWT.

    Only cryptographic and structural checks happen here. Audience and
    expiration are policy and are left to the verify use case, so PyJWT's
    own claim validation (including the `sub` and `jti` type checks) is
    switched off except for requiring that `aud` and `exp` are present.
    """

    _DECODE_OPTIONS = {
        "verify_signature": True,
        "verify_aud": False,
        "verify_exp": False,
        "verify_nbf": False,
        "verify_iat": False,
        "verify_iss": False,
        "verify_sub": False,
        "verify_jti": False,
        "require": ["aud", "exp"],
    }

    def read_header(self, token: str) -> Mapping[str, Any]:
        try:
            return jwt.get_unverified_header(token)
        except (PyJWTError, UnicodeError) as exc:
            raise HeaderDecodeError(f"malformed token header: {exc}") from exc

    def decode(self, token: str, key: SigningKey) -> Mapping[str, Any]:
        try:
            # Pin the algorithm to the key's; the header's `alg` is untrusted.
            return jwt.decode(
                token,
                key.material,
                algorithms=[key.algorithm],
                options=self._DECODE_OPTIONS,
            )
        except (PyJWTError, UnicodeError) as exc:
            raise ClaimsDecodeError(f"token verification failed: {exc}") from exc
