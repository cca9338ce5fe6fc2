from __future__ import annotations

from pydantic import BaseModel


class VerifiedTokenOut(BaseModel):
    uid: str
    issuer: str
    audience: str
    expires_at: int
    issued_at: int | None = None
    auth_time: int | None = None
    email: str | None = None
    sign_in_provider: str | None = None


class HealthOut(BaseModel):
    status: str
