# src/oidc_verifier/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional


# --- Key value objects ---------------------------------------------------


@dataclass(frozen=True, slots=True)
class SigningKey:
    """
    One public signing key published by the identity provider.

    `material` is whatever the signature-verification capability needs
    (for the PyJWT adapter: a `cryptography` public key object). The
    domain never looks inside it.
    """
    key_id: str
    key_type: str
    algorithm: str
    material: Any = field(repr=False, compare=False)
    use: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.key_id} ({self.key_type}/{self.algorithm})"


# --- Policy value objects ------------------------------------------------


def _normalize(values: Iterable[str]) -> FrozenSet[str]:
    """
    Normalize an iterable of strings into a frozenset.
    If a plain string is passed, treat it as a single-element collection.
    """
    if isinstance(values, str):
        return frozenset((values,))
    return frozenset(values)


@dataclass(frozen=True, slots=True)
class AllowedAudiences:
    """
    Audiences this service accepts tokens for.

    An empty set is legal but rejects every token at the audience check,
    which is almost always a misconfiguration.
    """

    values: FrozenSet[str] = frozenset()

    def __init__(self, values: Iterable[str] | None = None) -> None:
        object.__setattr__(self, "values", _normalize(values or ()))

    @property
    def is_empty(self) -> bool:
        return not self.values

    def intersects(self, audience: Iterable[str]) -> bool:
        """True if at least one entry of `audience` is allowed."""
        return not self.values.isdisjoint(audience)

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def __len__(self) -> int:
        return len(self.values)
