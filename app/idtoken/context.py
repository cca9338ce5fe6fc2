"""Read-only result produced after an ID token passes every check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VerifiedToken:
    """
    Small, serializable view of a verified ID token for the rest of the app.

    Only ``IdTokenVerifier`` builds these, and only after signature and claims
    checks have all passed.
    """

    subject: str
    """User id assigned by the provider (``sub``)."""

    issuer: str
    audience: str
    expires_at: int
    issued_at: int | None
    auth_time: int | None
    """When the user last signed in, as validated from ``auth_time``."""

    claims: Mapping[str, Any]
    """Every claim in the token payload, read-only."""

    @property
    def uid(self) -> str:
        return self.subject

    @property
    def email(self) -> str | None:
        value = self.claims.get("email")
        return value if isinstance(value, str) else None

    @property
    def sign_in_provider(self) -> str | None:
        """e.g. ``password`` or ``google.com``; nested under the ``firebase`` claim."""
        firebase = self.claims.get("firebase")
        if not isinstance(firebase, Mapping):
            return None
        provider = firebase.get("sign_in_provider")
        return provider if isinstance(provider, str) else None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "uid": self.uid,
            "subject": self.subject,
            "issuer": self.issuer,
            "audience": self.audience,
            "expires_at": self.expires_at,
            "issued_at": self.issued_at,
            "auth_time": self.auth_time,
            "email": self.email,
            "sign_in_provider": self.sign_in_provider,
        }
