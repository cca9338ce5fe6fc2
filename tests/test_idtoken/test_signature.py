"""Tests for SignatureVerifier."""

from datetime import datetime, timezone

import jwt
import pytest

from app.idtoken.errors import SignatureMismatchError
from app.idtoken.keys import SigningKey
from app.idtoken.signature import SignatureVerifier
from app.idtoken.tokens import parse_token


def _signing_key(private_key, kid="K1") -> SigningKey:
    return SigningKey(
        key_id=kid,
        public_key=private_key.public_key(),
        not_before=datetime(2023, 1, 1, tzinfo=timezone.utc),
        not_after=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def _flip_signature_byte(raw: str) -> str:
    signing_input, signature = raw.rsplit(".", 1)
    sig = bytearray(jwt.utils.base64url_decode(signature))
    sig[len(sig) // 2] ^= 0x01
    return f"{signing_input}.{jwt.utils.base64url_encode(bytes(sig)).decode()}"


def test_valid_signature_passes(make_token, rsa_key):
    parsed = parse_token(make_token())
    SignatureVerifier().verify(parsed, _signing_key(rsa_key), "RS256")


def test_flipped_signature_byte_fails(make_token, rsa_key):
    parsed = parse_token(_flip_signature_byte(make_token()))
    with pytest.raises(SignatureMismatchError):
        SignatureVerifier().verify(parsed, _signing_key(rsa_key), "RS256")


def test_tampered_payload_fails(make_token, rsa_key):
    header, _, signature = make_token().split(".")
    forged_payload = jwt.utils.base64url_encode(b'{"sub":"admin","aud":"proj-x","exp":9999999999}').decode()
    parsed = parse_token(f"{header}.{forged_payload}.{signature}")
    with pytest.raises(SignatureMismatchError):
        SignatureVerifier().verify(parsed, _signing_key(rsa_key), "RS256")


def test_wrong_key_fails(make_token, rsa_key, other_rsa_key):
    parsed = parse_token(make_token())
    with pytest.raises(SignatureMismatchError):
        SignatureVerifier().verify(parsed, _signing_key(other_rsa_key), "RS256")


def test_hmac_token_rejected_before_key_use(make_token, rsa_key):
    """A token declaring HS256 must never be checked as HMAC with the public key."""
    parsed = parse_token(make_token(key="x" * 32, algorithm="HS256"))
    with pytest.raises(SignatureMismatchError):
        SignatureVerifier().verify(parsed, _signing_key(rsa_key), "RS256")


def test_other_rsa_algorithm_rejected(make_token, rsa_key):
    parsed = parse_token(make_token(algorithm="RS512"))
    with pytest.raises(SignatureMismatchError):
        SignatureVerifier().verify(parsed, _signing_key(rsa_key), "RS256")


def test_error_message_is_generic(make_token, rsa_key, other_rsa_key):
    verifier = SignatureVerifier()
    messages = set()
    for raw, key in [
        (make_token(algorithm="RS512"), rsa_key),
        (make_token(), other_rsa_key),
        (_flip_signature_byte(make_token()), rsa_key),
    ]:
        with pytest.raises(SignatureMismatchError) as exc_info:
            verifier.verify(parse_token(raw), _signing_key(key), "RS256")
        messages.add(str(exc_info.value))
    assert messages == {"Token signature mismatch"}


def test_unsupported_required_algorithm_is_programming_error(make_token, rsa_key):
    with pytest.raises(ValueError):
        SignatureVerifier().verify(parse_token(make_token()), _signing_key(rsa_key), "HS256")
