"""
FastAPI routes for authentication.

Prefix: /api/auth
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from userdir.auth.sessions import SessionIssuer
from userdir.core.config import is_production
from userdir.services.directory_service import DirectoryService
from userdir.utils.result import capture

from .auth_deps import SESSION_COOKIE_NAME, get_directory, get_session_token, get_sessions, unwrap
from .schemas import LoginRequest, MessageResponse, TokenResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, directory: DirectoryService = Depends(get_directory)):
    """
    Exchange login and password for a session token.

    The token is returned in the body and also set as an httponly cookie.
    Unknown login and wrong password produce the same 401.
    """
    token = unwrap(capture(directory.authenticate, body.login, body.password))
    response = JSONResponse(content=TokenResponse(token=token).model_dump())
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=directory.settings.session_expiry_hours * 60 * 60,
        httponly=True,
        secure=is_production(directory.settings),
        samesite="lax",
    )
    return response


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, sessions: SessionIssuer = Depends(get_sessions)):
    """Invalidate the caller's session (idempotent)."""
    token = get_session_token(request)
    if token:
        sessions.revoke(token)
    response = JSONResponse(MessageResponse(message="Logged out").model_dump())
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response
