"""FastAPI application for the user directory API"""

import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from userdir import __version__
from userdir.auth.sessions import SessionIssuer
from userdir.core.config import Settings, get_settings
from userdir.services.directory_service import DirectoryService
from userdir.utils.exceptions import CacheIntegrityError
from userdir.utils.logger import get_logger, setup_logging

from .auth_routes import router as auth_router
from .user_routes import router as user_router

logger = get_logger(__name__)


def create_app(
    directory: Optional[DirectoryService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the API app around a directory service.

    When no service is given a fresh one is created, seeded with the
    bootstrap administrator and wired to an in-memory session issuer.
    """
    settings = settings or (directory.settings if directory else get_settings())
    if directory is None:
        sessions = SessionIssuer(expiry_hours=settings.session_expiry_hours)
        directory = DirectoryService(token_issuer=sessions, settings=settings)
    elif isinstance(directory.token_issuer, SessionIssuer):
        sessions = directory.token_issuer
    else:
        raise ValueError("The HTTP API needs a directory that issues SessionIssuer tokens")

    app = FastAPI(
        title=settings.app_name,
        description="User directory with cached reads, soft delete and admin policy",
        version=__version__,
    )
    app.state.directory = directory
    app.state.sessions = sessions

    # CORS middleware - configurable for production
    cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CacheIntegrityError)
    async def cache_integrity_handler(request: Request, exc: CacheIntegrityError):
        logger.error("Cache integrity violation", path=request.url.path, key=exc.cache_key)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/api/health")
    def health():
        return {"status": "ok", "users": len(directory.store), "cache": directory.cache.stats()}

    app.include_router(auth_router)
    app.include_router(user_router)
    return app


def build_default_app() -> FastAPI:
    """Entry point for uvicorn: configure logging and build the app"""
    settings = get_settings()
    setup_logging(settings)
    logger.info("Starting user directory", environment=settings.environment)
    return create_app(settings=settings)
