from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Token verification settings (project id, certificate URL, skew) live in
      ``app.idtoken.config.VerifierConfig`` so that package stays standalone.
    - Everything here can be overridden via ``APP_*`` env vars.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    log_level: str = "INFO"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


@lru_cache
def get_settings() -> Settings:
    return Settings()
