"""Configuration from environment variables. No hardcoded project ids."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CERT_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
DEFAULT_ISSUER_BASE = "https://securetoken.google.com"
DEFAULT_CLOCK_SKEW_SECONDS = 300
DEFAULT_CERT_CACHE_TTL_SECONDS = 3600
DEFAULT_CERT_FETCH_TIMEOUT_SECONDS = 10


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class VerifierConfig:
    """
    ID token verifier configuration.

    Required:
        FIREBASE_PROJECT_ID: Project the tokens must be issued for. Used as the
            expected audience and as the last path segment of the issuer.

    Optional:
        ID_TOKEN_CERT_URL: Endpoint returning ``{kid: PEM certificate}``.
        ID_TOKEN_ISSUER_BASE: Issuer prefix (default https://securetoken.google.com).
        CLOCK_SKEW_SECONDS: Seconds of tolerance for exp (default 300).
        CERT_CACHE_TTL_SECONDS: Certificate cache lifetime when the endpoint
            sends no max-age (default 3600).
        CERT_FETCH_TIMEOUT_SECONDS: HTTP timeout for the certificate fetch (default 10).
    """

    project_id: str
    cert_url: str = DEFAULT_CERT_URL
    issuer_base: str = DEFAULT_ISSUER_BASE
    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS
    cert_cache_ttl_seconds: int = DEFAULT_CERT_CACHE_TTL_SECONDS
    cert_fetch_timeout_seconds: int = DEFAULT_CERT_FETCH_TIMEOUT_SECONDS

    @property
    def expected_audience(self) -> str:
        return self.project_id

    @property
    def issuer(self) -> str:
        return f"{self.issuer_base.rstrip('/')}/{self.project_id}"

    @classmethod
    def from_environ(cls) -> VerifierConfig:
        project = _strip_or_none(_getenv("FIREBASE_PROJECT_ID"))
        if not project:
            raise _config_error("FIREBASE_PROJECT_ID must be set")
        return cls(
            project_id=project,
            cert_url=_strip_or_none(_getenv("ID_TOKEN_CERT_URL")) or DEFAULT_CERT_URL,
            issuer_base=_strip_or_none(_getenv("ID_TOKEN_ISSUER_BASE")) or DEFAULT_ISSUER_BASE,
            clock_skew_seconds=_getenv_int("CLOCK_SKEW_SECONDS", DEFAULT_CLOCK_SKEW_SECONDS),
            cert_cache_ttl_seconds=_getenv_int("CERT_CACHE_TTL_SECONDS", DEFAULT_CERT_CACHE_TTL_SECONDS),
            cert_fetch_timeout_seconds=_getenv_int(
                "CERT_FETCH_TIMEOUT_SECONDS", DEFAULT_CERT_FETCH_TIMEOUT_SECONDS
            ),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
