from __future__ import annotations

import os

from .settings import VerifierSettings


def settings_from_env() -> VerifierSettings:
    def _bool(key: str, default: bool = True) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _float(key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError as exc:
            raise RuntimeError(f"{key} must be a number, got {raw!r}") from exc

    def _split_csv(key: str) -> list[str]:
        raw = os.getenv(key)
        if not raw:
            return []
        return [x.strip() for x in raw.split(",") if x and x.strip()]

    certs_url = os.getenv("OIDC_CERTS_URL")
    if not certs_url:
        raise RuntimeError("Missing token verifier settings: OIDC_CERTS_URL")

    return VerifierSettings(
        certs_url=certs_url,
        allowed_audiences=_split_csv("OIDC_ALLOWED_AUDIENCES"),
        fetch_timeout=_float("OIDC_FETCH_TIMEOUT", 10.0),
        verify_ssl=_bool("OIDC_VERIFY_SSL", True),
    )
