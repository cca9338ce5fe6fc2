"""
Pytest fixtures for the test suite.

Tokens are signed with freshly generated RSA keys and the matching public keys
are served as self-signed X.509 certificates through a mocked HTTP session, so
the real parsing, signature and claims code runs without network access.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from app.idtoken.config import VerifierConfig

PROJECT_ID = "proj-x"
ISSUER_BASE = "https://issuer"
CERT_URL = "https://certs.example.test/x509"
NOW = 1_700_000_000


def make_certificate_pem(private_key: rsa.RSAPrivateKey, common_name: str = "securetoken") -> str:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    not_before = datetime(2023, 1, 1, tzinfo=timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=730))
        .sign(private_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


def cert_response(body, headers: dict | None = None) -> MagicMock:
    """A stand-in for ``requests.Response`` serving ``body`` as JSON."""
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = body
    resp.headers = headers or {}
    return resp


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def cert_pem(rsa_key) -> str:
    return make_certificate_pem(rsa_key)


@pytest.fixture
def verifier_config() -> VerifierConfig:
    return VerifierConfig(
        project_id=PROJECT_ID,
        cert_url=CERT_URL,
        issuer_base=ISSUER_BASE,
    )


@pytest.fixture
def cert_session(cert_pem) -> MagicMock:
    """HTTP session whose GET returns ``{"K1": <cert>}``."""
    session = MagicMock()
    session.get.return_value = cert_response({"K1": cert_pem})
    return session


@pytest.fixture
def make_token(rsa_key):
    """
    Factory for signed ID tokens.

    Defaults to a valid token for ``proj-x`` signed with ``kid=K1``. Pass claim
    overrides as keyword arguments; a value of None removes the claim.
    """

    def _make(*, kid: str | None = "K1", key=None, algorithm: str = "RS256", **overrides) -> str:
        claims = {
            "iss": f"{ISSUER_BASE}/{PROJECT_ID}",
            "aud": PROJECT_ID,
            "sub": "user-42",
            "iat": NOW - 60,
            "exp": NOW + 3600,
            "auth_time": NOW - 120,
            "email": "user42@example.com",
            "firebase": {"sign_in_provider": "password"},
        }
        for name, value in overrides.items():
            if value is None:
                claims.pop(name, None)
            else:
                claims[name] = value
        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(claims, key if key is not None else rsa_key, algorithm=algorithm, headers=headers)

    return _make
