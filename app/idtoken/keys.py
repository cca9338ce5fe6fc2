"""
Signing-certificate fetch and cache. No per-request fetches.

Background for newcomers:
    The identity provider signs every ID token with a private RSA key. To
    verify the signature we need the matching **public** key. The provider
    publishes its current signing certificates as a JSON object mapping key id
    (``kid``) to a PEM-encoded X.509 certificate. This module fetches that
    object, turns every certificate into a public key, and caches the result.

    The provider **rotates** signing keys a few times a day and tells clients
    how long to cache the current set through ``Cache-Control: max-age``. If a
    token names a ``kid`` we do not have, we refresh once before rejecting.

Thread safety:
    Readers take a single reference to the current ``KeySet`` and never lock.
    A refresh builds a brand new ``KeySet`` and swaps the reference, so a
    reader sees either the old set or the new one in full. Refreshes are
    serialized; a caller that waited on another caller's refresh reuses its
    result instead of fetching again.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

import requests
from cachecontrol.controller import CacheController
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from .errors import KeyFetchError, MissingKeyIdError, UnknownKeyError

logger = logging.getLogger(__name__)

# Only used to read Cache-Control; certificates are cached as parsed KeySets, not responses.
_cache_controller = CacheController()


@dataclass(frozen=True)
class SigningKey:
    """A provider public key and the validity window of its certificate."""

    key_id: str
    public_key: RSAPublicKey
    not_before: datetime
    not_after: datetime


@dataclass(frozen=True)
class KeySet:
    """Immutable snapshot of the provider's signing keys."""

    keys: Mapping[str, SigningKey]
    fetched_at: float
    expires_at: float

    def get(self, kid: str) -> SigningKey | None:
        return self.keys.get(kid)

    def is_stale(self, now: float) -> bool:
        return now >= self.expires_at

    def __len__(self) -> int:
        return len(self.keys)


def _max_age(headers: Any) -> int | None:
    """Return ``max-age`` seconds from the response Cache-Control header, if any."""
    if not isinstance(headers, Mapping):
        return None
    max_age = _cache_controller.parse_cache_control(headers).get("max-age")
    return max(max_age, 0) if isinstance(max_age, int) else None


def _load_signing_key(kid: str, pem: str) -> SigningKey:
    cert = x509.load_pem_x509_certificate(pem.encode("utf-8"))
    public_key = cert.public_key()
    if not isinstance(public_key, RSAPublicKey):
        raise ValueError(f"certificate for kid={kid!r} does not hold an RSA key")
    return SigningKey(
        key_id=kid,
        public_key=public_key,
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
    )


class CertificateKeySource:
    """
    In-memory cache of the provider's signing certificates, keyed by ``kid``.

    Fetches from ``cert_url`` and caches for the endpoint's ``max-age`` (or
    ``ttl_seconds`` when the response does not say). On an unknown ``kid`` the
    cache is refreshed once to handle key rotation before giving up.
    """

    def __init__(
        self,
        cert_url: str,
        ttl_seconds: int = 3600,
        timeout_seconds: float = 10,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._url = cert_url
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds
        self._http = session if session is not None else requests
        self._clock = clock
        self._key_set: KeySet | None = None
        self._refresh_lock = threading.Lock()

    @property
    def keys(self) -> KeySet | None:
        """The current key set, or None before the first successful fetch."""
        return self._key_set

    def _fetch(self) -> tuple[Any, int | None]:
        try:
            resp = self._http.get(self._url, timeout=self._timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            raise KeyFetchError(self._url, type(e).__name__) from e
        except ValueError as e:
            raise KeyFetchError(self._url, "response is not JSON") from e
        return body, _max_age(resp.headers)

    def _build_key_set(self, body: Any, max_age: int | None) -> KeySet:
        if not isinstance(body, dict) or not body:
            raise KeyFetchError(self._url, "expected a non-empty JSON object of certificates")

        keys: dict[str, SigningKey] = {}
        for kid, pem in body.items():
            if not isinstance(pem, str):
                raise KeyFetchError(self._url, f"certificate for kid={kid!r} is not a string")
            try:
                keys[kid] = _load_signing_key(kid, pem)
            except ValueError as e:
                raise KeyFetchError(self._url, f"invalid certificate for kid={kid!r}") from e

        now = self._clock()
        ttl = max_age if max_age is not None else self._ttl
        return KeySet(keys=MappingProxyType(keys), fetched_at=now, expires_at=now + ttl)

    def _refresh_locked(self) -> KeySet:
        try:
            body, max_age = self._fetch()
            key_set = self._build_key_set(body, max_age)
        except KeyFetchError as e:
            logger.warning("Signing certificate refresh failed: %s", e.reason)
            raise
        self._key_set = key_set
        logger.debug(
            "Signing certificates refreshed uri=%s keys=%d ttl=%ds",
            self._url,
            len(key_set),
            int(key_set.expires_at - key_set.fetched_at),
        )
        return key_set

    def _refresh_unless_replaced(self, seen: KeySet | None) -> KeySet:
        """Refresh, unless another caller swapped in a new set since ``seen`` was read."""
        with self._refresh_lock:
            current = self._key_set
            if current is not None and current is not seen:
                return current
            return self._refresh_locked()

    def refresh(self) -> KeySet:
        """Force-refresh the cache regardless of its age."""
        with self._refresh_lock:
            return self._refresh_locked()

    def resolve(self, kid: str) -> SigningKey:
        """
        Return the signing key for ``kid``.

        Raises MissingKeyIdError for an empty kid, KeyFetchError when the
        certificates cannot be loaded, and UnknownKeyError when ``kid`` is
        absent even from a freshly fetched set.
        """
        if not isinstance(kid, str) or not kid:
            raise MissingKeyIdError()

        key_set = self._key_set
        if key_set is not None and not key_set.is_stale(self._clock()):
            key = key_set.get(kid)
            if key is not None:
                return key
            logger.info("kid not in cached certificates; refreshing for possible key rotation")

        key_set = self._refresh_unless_replaced(key_set)
        key = key_set.get(kid)
        if key is None:
            raise UnknownKeyError(kid)
        return key
