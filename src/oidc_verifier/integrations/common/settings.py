from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True)
class VerifierSettings:
    """
    Token verifier wiring settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    certs_url: str
    allowed_audiences: List[str] = field(default_factory=list)
    fetch_timeout: float = 10.0
    verify_ssl: bool = True

    @property
    def certs_url_clean(self) -> str:
        return self.certs_url.strip()
