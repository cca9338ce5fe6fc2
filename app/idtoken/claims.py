"""
Typed ID token claims and the checks applied to them.

Background for newcomers:
    A valid signature only proves the provider minted the token. The claims
    still have to say the token is for **us** and still current:

    1. ``exp`` (expiry) must not be in the past, allowing some clock skew.
    2. ``aud`` (audience) must be exactly our project id.
    3. ``iss`` (issuer) must be ``<issuer base>/<project id>``.
    4. ``sub`` (subject, the user id) must be a non-empty string of at most
       128 characters.

    Each failure has its own error type so a misconfigured client shows up in
    the logs as "wrong project" rather than a generic "invalid token".
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import (
    AudienceMismatchError,
    ExpiredTokenError,
    InvalidSubjectError,
    IssuerMismatchError,
    MalformedTokenError,
)

DEFAULT_EXPIRY_SKEW_SECONDS = 300
MAX_SUBJECT_LENGTH = 128


def _timestamp_claim(payload: Mapping[str, Any], name: str, *, required: bool) -> int | None:
    value = payload.get(name)
    if value is None:
        if required:
            raise MalformedTokenError(f"'{name}' claim is missing")
        return None
    # bool is an int subclass; true/false is never a timestamp.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedTokenError(f"'{name}' claim must be a number")
    # inf and NaN are JSON-legal in Python's decoder but are not instants.
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedTokenError(f"'{name}' claim must be a finite number")
    return int(value)


@dataclass(frozen=True)
class IdTokenClaims:
    """
    Claims read from a token whose signature has already been verified.

    ``issuer``, ``audience`` and ``subject`` are kept exactly as sent; their
    shape is judged by ``ClaimsValidator``.
    """

    issuer: Any
    audience: Any
    subject: Any
    expires_at: int
    issued_at: int | None = None
    auth_time: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> IdTokenClaims:
        return cls(
            issuer=payload.get("iss"),
            audience=payload.get("aud"),
            subject=payload.get("sub"),
            expires_at=_timestamp_claim(payload, "exp", required=True),
            issued_at=_timestamp_claim(payload, "iat", required=False),
            auth_time=_timestamp_claim(payload, "auth_time", required=False),
        )


def check_expiry(claims: IdTokenClaims, now: float, skew: int = DEFAULT_EXPIRY_SKEW_SECONDS) -> None:
    if claims.expires_at + skew < now:
        raise ExpiredTokenError(claims.expires_at, now)


def check_audience(claims: IdTokenClaims, expected: str) -> None:
    # Single audience only; a list is rejected even if it contains ``expected``.
    if not isinstance(claims.audience, str) or claims.audience != expected:
        raise AudienceMismatchError(expected, claims.audience)


def check_issuer(claims: IdTokenClaims, expected: str) -> None:
    if not isinstance(claims.issuer, str) or claims.issuer != expected:
        raise IssuerMismatchError(expected, claims.issuer)


def check_subject(claims: IdTokenClaims) -> None:
    subject = claims.subject
    if not isinstance(subject, str) or not subject or len(subject) > MAX_SUBJECT_LENGTH:
        raise InvalidSubjectError(subject)


class ClaimsValidator:
    """Runs the expiry, audience, issuer and subject checks in that order."""

    def __init__(
        self,
        expected_audience: str,
        expected_issuer: str,
        expiry_skew: int = DEFAULT_EXPIRY_SKEW_SECONDS,
    ) -> None:
        self.expected_audience = expected_audience
        self.expected_issuer = expected_issuer
        self.expiry_skew = expiry_skew

    def validate(self, claims: IdTokenClaims, now: float) -> None:
        check_expiry(claims, now, self.expiry_skew)
        check_audience(claims, self.expected_audience)
        check_issuer(claims, self.expected_issuer)
        check_subject(claims)
