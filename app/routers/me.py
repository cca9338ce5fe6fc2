from __future__ import annotations

from fastapi import APIRouter, Depends

from app.idtoken import VerifiedToken
from app.schemas.identity import VerifiedTokenOut
from app.security.dependencies import get_verified_token

router = APIRouter(tags=["identity"])


@router.get("/me", response_model=VerifiedTokenOut)
def read_me(identity: VerifiedToken = Depends(get_verified_token)) -> VerifiedTokenOut:
    return VerifiedTokenOut.model_validate(identity.to_dict())
