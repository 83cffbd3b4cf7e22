"""
FastAPI dependencies for authentication and error mapping.

The caller is identified by a session token (Bearer header or cookie) or by
HTTP Basic credentials. Routes receive the caller's login and hand it to the
directory service, which owns every authorization decision.
"""

import base64
import binascii
from typing import Dict, Optional, TypeVar

from fastapi import Depends, HTTPException, Request, status

from userdir.auth.sessions import SessionIssuer
from userdir.services.directory_service import DirectoryService
from userdir.utils.exceptions import ErrorKind
from userdir.utils.logger import get_logger
from userdir.utils.result import Result

logger = get_logger(__name__)

T = TypeVar("T")

SESSION_COOKIE_NAME = "session_token"

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LOGIN_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHENTICATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_INACTIVE: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ADMIN_ACCESS_REQUIRED: status.HTTP_403_FORBIDDEN,
    ErrorKind.ACCOUNT_UPDATE_FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.CACHE_INTEGRITY: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_directory(request: Request) -> DirectoryService:
    return request.app.state.directory


def get_sessions(request: Request) -> SessionIssuer:
    return request.app.state.sessions


def unwrap(result: Result[T]) -> T:
    """Return the value of a successful result or raise the mapped HTTP error"""
    if result.ok:
        return result.value
    raise HTTPException(status_code=STATUS_BY_KIND[result.kind], detail=result.message)


def _unauthorized(detail: str, scheme: str = "Bearer") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": scheme},
    )


def get_session_token(request: Request) -> Optional[str]:
    """Extract session token from request (Authorization header or cookie)"""
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


def _parse_basic(auth_header: str) -> Optional[tuple]:
    encoded = auth_header[6:].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    login, sep, password = decoded.partition(":")
    if not sep:
        return None
    return login, password


def get_current_login(
    request: Request,
    directory: DirectoryService = Depends(get_directory),
    sessions: SessionIssuer = Depends(get_sessions),
) -> str:
    """Dependency resolving the caller to a login, 401 when that fails"""
    auth_header = request.headers.get("Authorization") or ""

    if auth_header.lower().startswith("basic "):
        credentials = _parse_basic(auth_header)
        if credentials is None:
            raise _unauthorized("Invalid credentials format", scheme="Basic")
        user = directory.get_by_credentials(*credentials)
        if user is None:
            raise _unauthorized("Invalid credentials", scheme="Basic")
        return user.login

    token = get_session_token(request)
    if not token:
        raise _unauthorized("Authorization header missing")

    session = sessions.validate(token)
    if session is None:
        raise _unauthorized("Invalid or expired session")

    # Sessions follow the account id so a renamed user keeps working
    user = directory.store.find_by_id(session.user_id)
    if user is None or not user.is_active:
        sessions.revoke(token)
        logger.info("Session dropped for missing or inactive user", user_id=session.user_id)
        raise _unauthorized("Invalid or expired session")
    return user.login
