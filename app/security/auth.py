from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from app.idtoken import IdTokenVerifier, TokenVerificationError, VerifiedToken
from app.settings import Settings

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request, settings: Settings) -> str | None:
    """
    Read the ID token from `Authorization: Bearer <token>`.

    Returns None when the header is absent; a present but badly formed header is a 400.
    """

    header_name = settings.authorization_header
    bearer_prefix = settings.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )

    return token


def verify_bearer_token(verifier: IdTokenVerifier, token: str, request: Request) -> VerifiedToken:
    """
    Verify the token, hiding the failure reason from the client.

    Operators get the error class, stage and detail in the log; the response
    only ever says "Invalid token".
    """

    try:
        return verifier.verify(token)
    except TokenVerificationError as exc:
        logger.warning(
            "Token verification failed path=%s error=%s stage=%s detail=%s",
            request.url.path,
            type(exc).__name__,
            exc.stage.value if exc.stage else None,
            exc,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.public_message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
