from __future__ import annotations

from fastapi import APIRouter

from app.schemas.identity import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health() -> HealthOut:
    return HealthOut(status="ok")
