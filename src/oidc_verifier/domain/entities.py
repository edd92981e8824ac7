from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from .constants import ErrorKind, OutcomeStatus
from .value_objects import SigningKey


class KeySet:
    """
    Immutable collection of signing keys, addressable by key id.

    Keys keep provider order. When the provider publishes the same `kid`
    more than once, the first entry wins and later ones are ignored.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[SigningKey] = ()) -> None:
        by_id: dict[str, SigningKey] = {}
        for key in keys:
            by_id.setdefault(key.key_id, key)
        self._keys: Mapping[str, SigningKey] = MappingProxyType(by_id)

    def lookup(self, key_id: str) -> Optional[SigningKey]:
        """Exact match on key id, no normalization."""
        return self._keys.get(key_id)

    @property
    def key_ids(self) -> Tuple[str, ...]:
        return tuple(self._keys)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._keys

    def __iter__(self) -> Iterator[SigningKey]:
        return iter(self._keys.values())

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"KeySet(key_ids={list(self._keys)!r})"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Payload of a token whose signature has already been verified.

    Only `audience` and `expires_at` are interpreted. Everything else the
    provider put in the token is passed through untouched in `raw`.
    """
    audience: Tuple[str, ...]
    expires_at: int
    subject: Optional[str] = None
    email: Optional[str] = None
    issuer: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TokenClaims":
        """
        Build claims from a verified payload.

        Raises:
            ValueError if `aud` or `exp` are missing or of the wrong type.
        """
        if "aud" not in payload:
            raise ValueError("missing 'aud' claim")
        aud_raw = payload["aud"]
        if isinstance(aud_raw, str):
            audience: Tuple[str, ...] = (aud_raw,)
        elif isinstance(aud_raw, (list, tuple)) and all(isinstance(a, str) for a in aud_raw):
            audience = tuple(aud_raw)
        else:
            raise ValueError("'aud' claim must be a string or a list of strings")

        if "exp" not in payload:
            raise ValueError("missing 'exp' claim")
        exp = payload["exp"]
        # bool is an int subclass, but `true` is not an expiration
        if isinstance(exp, bool) or not isinstance(exp, int):
            raise ValueError("'exp' claim must be an integer")

        return cls(
            audience=audience,
            expires_at=exp,
            subject=_optional_str(payload.get("sub")),
            email=_optional_str(payload.get("email")),
            issuer=_optional_str(payload.get("iss")),
            raw=MappingProxyType(dict(payload)),
        )

    def get(self, name: str, default: Any = None) -> Any:
        return self.raw.get(name, default)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class VerificationOutcome:
    """
    Result of verifying one token.

    - VALID:    signature and policy checks passed, `claims` is set
    - REJECTED: token is authentic, but audience or expiration says no
    - FAILED:   token could not be verified at all, `error_kind` says why

    Treat REJECTED and FAILED the same when deciding access; the
    distinction is for server-side diagnostics.
    """
    status: OutcomeStatus
    claims: Optional[TokenClaims] = None
    error_kind: Optional[ErrorKind] = None
    reason: str = ""

    @classmethod
    def valid(cls, claims: TokenClaims) -> "VerificationOutcome":
        return cls(status=OutcomeStatus.VALID, claims=claims)

    @classmethod
    def rejected(cls, reason: str) -> "VerificationOutcome":
        return cls(status=OutcomeStatus.REJECTED, reason=reason)

    @classmethod
    def failed(cls, kind: ErrorKind, reason: str) -> "VerificationOutcome":
        return cls(status=OutcomeStatus.FAILED, error_kind=kind, reason=reason)

    @property
    def is_valid(self) -> bool:
        return self.status is OutcomeStatus.VALID

    @property
    def is_rejected(self) -> bool:
        return self.status is OutcomeStatus.REJECTED

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def __bool__(self) -> bool:
        return self.is_valid
