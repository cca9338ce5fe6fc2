"""
Standalone utility to verify provider-issued ID tokens and read their claims.

This package has no dependency on other app packages (app.security, app.routers, etc.).
Use verify_id_token() with a project id and a token string to get a VerifiedToken.
"""

from .claims import ClaimsValidator, IdTokenClaims
from .config import VerifierConfig
from .context import VerifiedToken
from .errors import (
    AudienceMismatchError,
    ClaimsError,
    ExpiredTokenError,
    InvalidSubjectError,
    IssuerMismatchError,
    KeyFetchError,
    MalformedTokenError,
    MissingKeyIdError,
    SignatureMismatchError,
    TokenVerificationError,
    UnknownKeyError,
    VerificationStage,
)
from .keys import CertificateKeySource, KeySet, SigningKey
from .signature import SignatureVerifier
from .tokens import ParsedToken, parse_token
from .verifier import IdTokenVerifier, verify_id_token

__all__ = [
    "VerifierConfig",
    "VerifiedToken",
    "IdTokenVerifier",
    "verify_id_token",
    "CertificateKeySource",
    "KeySet",
    "SigningKey",
    "SignatureVerifier",
    "ClaimsValidator",
    "IdTokenClaims",
    "ParsedToken",
    "parse_token",
    "VerificationStage",
    "TokenVerificationError",
    "MalformedTokenError",
    "MissingKeyIdError",
    "KeyFetchError",
    "UnknownKeyError",
    "SignatureMismatchError",
    "ClaimsError",
    "ExpiredTokenError",
    "AudienceMismatchError",
    "IssuerMismatchError",
    "InvalidSubjectError",
]
