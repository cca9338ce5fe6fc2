"""
Signature check for parsed ID tokens.

The algorithm is fixed by the verifier, never taken from the token. A token
that declares ``HS256`` (or ``none``) is rejected before any key is used, so a
public RSA key can never be misused as an HMAC secret.
"""

from __future__ import annotations

import logging

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt.algorithms import RSAAlgorithm

from .errors import SignatureMismatchError
from .keys import SigningKey
from .tokens import ParsedToken

logger = logging.getLogger(__name__)

REQUIRED_ALGORITHM = "RS256"

_RSA_ALGORITHMS = {
    "RS256": RSAAlgorithm(RSAAlgorithm.SHA256),
    "RS384": RSAAlgorithm(RSAAlgorithm.SHA384),
    "RS512": RSAAlgorithm(RSAAlgorithm.SHA512),
}


class SignatureVerifier:
    """Checks that a token was signed by the private half of ``signing_key``."""

    def verify(
        self,
        parsed: ParsedToken,
        signing_key: SigningKey,
        required_algorithm: str = REQUIRED_ALGORITHM,
    ) -> None:
        """
        Raise SignatureMismatchError unless the token declares exactly
        ``required_algorithm`` and its signature verifies under the key.

        The error is the same for every failure; the reason only goes to the
        debug log.
        """
        algorithm = _RSA_ALGORITHMS.get(required_algorithm)
        if algorithm is None:
            raise ValueError(f"Unsupported signing algorithm: {required_algorithm!r}")

        if parsed.algorithm != required_algorithm:
            logger.debug("Signature rejected: token alg does not match %s", required_algorithm)
            raise SignatureMismatchError()

        if not isinstance(signing_key.public_key, RSAPublicKey):
            logger.debug("Signature rejected: kid=%s is not an RSA key", signing_key.key_id)
            raise SignatureMismatchError()

        if not algorithm.verify(parsed.signing_input, signing_key.public_key, parsed.signature):
            logger.debug("Signature rejected: verification failed for kid=%s", signing_key.key_id)
            raise SignatureMismatchError()
