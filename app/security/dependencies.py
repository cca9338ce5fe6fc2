from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from app.idtoken import IdTokenVerifier, VerifiedToken
from app.security.auth import extract_bearer_token, verify_bearer_token
from app.settings import Settings, get_settings


def get_token_verifier(request: Request) -> IdTokenVerifier:
    verifier = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        raise RuntimeError("Token verifier not configured. Did app startup run?")
    return verifier


def get_verified_token(
    request: Request,
    verifier: IdTokenVerifier = Depends(get_token_verifier),
    settings: Settings = Depends(get_settings),
) -> VerifiedToken:
    """
    Route dependency: the caller's verified ID token, or 401.

    The result is also attached to ``request.state.identity`` for code that
    does not take it as a parameter.
    """

    token = extract_bearer_token(request, settings)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = verify_bearer_token(verifier, token, request)
    request.state.identity = identity
    return identity
