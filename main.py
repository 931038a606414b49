"""
Account service: application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as users_router
from auth.jwt import TokenService
from config.settings import Settings, config
from database.repository import UserRepository

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[UserRepository] = None,
    token_service: Optional[TokenService] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators default to fresh instances built from ``settings``;
    pass them in to share or inspect state (tests do this).
    """
    settings = settings or config

    app = FastAPI(
        title="Account Service",
        version="1.0.0",
        description="User accounts and preferences behind bearer-token auth.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    app.state.repository = repository or UserRepository(bcrypt_rounds=settings.bcrypt_rounds)
    app.state.token_service = token_service or TokenService(
        settings.jwt_secret, expiry_seconds=settings.jwt_expiry_seconds,
    )
    if settings.jwt_secret == Settings.model_fields["jwt_secret"].default:
        logger.warning("JWT_SECRET not set, using the built-in development secret")

    # Routes
    app.include_router(auth_router)
    app.include_router(users_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
