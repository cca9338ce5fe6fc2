"""
Typed verification failures.

Every way a token can be rejected has its own exception class so callers (and
operators reading logs) can tell an expired token from a token minted for a
different project. The set is closed: nothing outside this module raises a
``TokenVerificationError`` subclass of its own.

``str(error)`` carries operator detail and may include offending claim values.
Anything returned to a client must use ``error.public_message`` instead, which
is the same for every failure.
"""

from __future__ import annotations

from enum import Enum


class VerificationStage(str, Enum):
    """Where in the pipeline a token was rejected."""

    PARSING = "parsing"
    KEY_RESOLUTION = "key_resolution"
    SIGNATURE_CHECK = "signature_check"
    CLAIMS_CHECK = "claims_check"


class TokenVerificationError(Exception):
    """Base class. Do not put the raw token in the message."""

    public_message = "Invalid token"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.stage: VerificationStage | None = None


class MalformedTokenError(TokenVerificationError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Malformed token: {reason}")
        self.reason = reason


class MissingKeyIdError(TokenVerificationError):
    def __init__(self) -> None:
        super().__init__("Token header has no 'kid'")


class KeyFetchError(TokenVerificationError):
    """Signing certificates could not be fetched or parsed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not load signing certificates from {url}: {reason}")
        self.url = url
        self.reason = reason


class UnknownKeyError(TokenVerificationError):
    def __init__(self, kid: str) -> None:
        super().__init__(f"No signing certificate for kid={kid!r}")
        self.kid = kid


class SignatureMismatchError(TokenVerificationError):
    """Generic on purpose: says nothing about why the signature was rejected."""

    def __init__(self) -> None:
        super().__init__("Token signature mismatch")


class ClaimsError(TokenVerificationError):
    """Base for failures found while checking the (signed) claims."""


class ExpiredTokenError(ClaimsError):
    def __init__(self, expires_at: int, now: float) -> None:
        super().__init__(f"Token expired at {expires_at} (now={int(now)})")
        self.expires_at = expires_at
        self.now = now


class AudienceMismatchError(ClaimsError):
    def __init__(self, expected: str, actual: object) -> None:
        super().__init__(f"Token audience {actual!r} does not match {expected!r}")
        self.expected = expected
        self.actual = actual


class IssuerMismatchError(ClaimsError):
    def __init__(self, expected: str, actual: object) -> None:
        super().__init__(f"Token issuer {actual!r} does not match {expected!r}")
        self.expected = expected
        self.actual = actual


class InvalidSubjectError(ClaimsError):
    def __init__(self, subject: object) -> None:
        super().__init__("Token subject must be a non-empty string of at most 128 characters")
        self.subject = subject
