"""Split a raw ID token into header, payload and signature without trusting it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import jwt

from .errors import MalformedTokenError

# Claims are judged by ClaimsValidator after the signature check, not by PyJWT.
_PARSE_ONLY = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


@dataclass(frozen=True)
class ParsedToken:
    """
    Structured, **unverified** view of a compact JWS token.

    Nothing in here may be trusted until the signature over ``signing_input``
    has been checked.
    """

    header: Mapping[str, Any]
    payload: Mapping[str, Any]
    signing_input: bytes
    signature: bytes

    @property
    def algorithm(self) -> str | None:
        alg = self.header.get("alg")
        return alg if isinstance(alg, str) else None

    @property
    def key_id(self) -> str | None:
        kid = self.header.get("kid")
        return kid if isinstance(kid, str) and kid else None


def parse_token(raw: str) -> ParsedToken:
    """
    Decode ``header.payload.signature`` into a ``ParsedToken``.

    Only the encoding is checked here (three base64url segments, JSON objects
    for header and payload). Signature and claims are left to later stages.
    """
    if not isinstance(raw, str) or not raw:
        raise MalformedTokenError("token must be a non-empty string")

    segments = raw.split(".")
    if len(segments) != 3:
        raise MalformedTokenError("expected three dot-separated segments")

    try:
        decoded = jwt.decode_complete(raw, options=dict(_PARSE_ONLY))
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(type(e).__name__) from e

    signing_input, _ = raw.rsplit(".", 1)
    return ParsedToken(
        header=MappingProxyType(dict(decoded["header"])),
        payload=MappingProxyType(dict(decoded["payload"])),
        signing_input=signing_input.encode("utf-8"),
        signature=decoded["signature"],
    )
