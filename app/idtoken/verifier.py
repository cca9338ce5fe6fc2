"""
Verify provider-signed ID tokens and expose their claims.

Background for newcomers:
    A client app signs the user in with the identity provider and gets back an
    ID token (a JWT). It sends that token to this backend with its requests.
    Before we trust **anything** in that token we must:

    1. Parse it (three base64url segments: header, payload, signature).
    2. Find the public key named by the header's ``kid``.
    3. Verify the **signature** with that key, using RS256 and nothing else.
    4. Check the claims: not expired, audience is our project, issuer is the
       provider's issuer for our project, subject looks like a user id.

    Only after all of that do we build a ``VerifiedToken`` for the rest of the
    app. Any failure raises a ``TokenVerificationError`` subclass and is final
    for that token; nothing is retried here.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from functools import lru_cache

from .claims import ClaimsValidator, IdTokenClaims
from .config import VerifierConfig
from .context import VerifiedToken
from .errors import MissingKeyIdError, TokenVerificationError, VerificationStage
from .keys import CertificateKeySource
from .signature import REQUIRED_ALGORITHM, SignatureVerifier
from .tokens import parse_token

logger = logging.getLogger(__name__)


class IdTokenVerifier:
    """
    Verifies ID tokens for one project.

    Holds one ``CertificateKeySource``, so reuse a single instance for many
    tokens (and threads) to share the certificate cache.
    """

    def __init__(
        self,
        config: VerifierConfig | None = None,
        key_source: CertificateKeySource | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or VerifierConfig.from_environ()
        self._keys = key_source or CertificateKeySource(
            self._config.cert_url,
            ttl_seconds=self._config.cert_cache_ttl_seconds,
            timeout_seconds=self._config.cert_fetch_timeout_seconds,
        )
        self._signatures = SignatureVerifier()
        self._claims = ClaimsValidator(
            expected_audience=self._config.expected_audience,
            expected_issuer=self._config.issuer,
            expiry_skew=self._config.clock_skew_seconds,
        )
        self._clock = clock

    @property
    def config(self) -> VerifierConfig:
        return self._config

    def verify(self, token: str) -> VerifiedToken:
        """
        Verify ``token`` and return its claims as a ``VerifiedToken``.

        Raises a ``TokenVerificationError`` subclass whose ``stage`` tells
        where the token was rejected. Never logs the token itself.
        """
        stage = VerificationStage.PARSING
        try:
            parsed = parse_token(token)

            stage = VerificationStage.KEY_RESOLUTION
            kid = parsed.key_id
            if kid is None:
                raise MissingKeyIdError()
            signing_key = self._keys.resolve(kid)

            stage = VerificationStage.SIGNATURE_CHECK
            self._signatures.verify(parsed, signing_key, REQUIRED_ALGORITHM)

            stage = VerificationStage.CLAIMS_CHECK
            claims = IdTokenClaims.from_payload(parsed.payload)
            self._claims.validate(claims, self._clock())
        except TokenVerificationError as e:
            e.stage = stage
            logger.info("Token rejected stage=%s error=%s", stage.value, type(e).__name__)
            raise

        return VerifiedToken(
            subject=claims.subject,
            issuer=claims.issuer,
            audience=claims.audience,
            expires_at=claims.expires_at,
            issued_at=claims.issued_at,
            auth_time=claims.auth_time,
            claims=parsed.payload,
        )


@lru_cache(maxsize=16)
def _verifier_for(config: VerifierConfig) -> IdTokenVerifier:
    return IdTokenVerifier(config=config)


def verify_id_token(project_id: str, token: str, config: VerifierConfig | None = None) -> VerifiedToken:
    """
    Convenience function: verify ``token`` for ``project_id``.

    Verifiers are cached per configuration, so repeated calls share one
    certificate cache. ``config`` supplies the remaining settings (certificate
    URL, skew, ...); its project id is replaced by ``project_id``. Use
    ``IdTokenVerifier`` directly when you want to control its lifetime.
    """
    config = replace(config, project_id=project_id) if config else VerifierConfig(project_id=project_id)
    return _verifier_for(config).verify(token)
