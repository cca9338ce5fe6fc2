from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.idtoken import IdTokenVerifier, VerifierConfig
from app.logging_config import configure_app_logging
from app.routers import health, me
from app.settings import get_settings

logger = logging.getLogger(__name__)


def create_app(verifier: IdTokenVerifier | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        if getattr(app.state, "token_verifier", None) is None:
            config = VerifierConfig.from_environ()
            app.state.token_verifier = IdTokenVerifier(config=config)
        logger.info(
            "ID token verifier ready project=%s certs=%s",
            app.state.token_verifier.config.project_id,
            app.state.token_verifier.config.cert_url,
        )

        yield
        # Shutdown (certificate cache is in-memory only)

    app = FastAPI(lifespan=lifespan)
    # Tests pass a verifier with a stubbed key source.
    app.state.token_verifier = verifier

    app.include_router(health.router)
    app.include_router(me.router)

    return app


app = create_app()
