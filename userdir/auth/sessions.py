"""
Opaque session tokens.

Sessions live in process memory only; a restart logs everybody out, which
matches the volatile user store.
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from ..models.user import UserRecord

SESSION_EXPIRY_HOURS = 24


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    login: str
    created_at: datetime
    expires_at: datetime


class SessionIssuer:
    """Issues and validates session tokens for authenticated users."""

    def __init__(
        self,
        expiry_hours: int = SESSION_EXPIRY_HOURS,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.expiry = timedelta(hours=expiry_hours)
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def issue_token(self, user: UserRecord) -> str:
        """Create a new session and return the session token"""
        token = secrets.token_urlsafe(32)
        now = self._clock()
        session = Session(
            token=token,
            user_id=user.id,
            login=user.login,
            created_at=now,
            expires_at=now + self.expiry,
        )
        with self._lock:
            self._sessions[token] = session
        return token

    def validate(self, token: str) -> Optional[Session]:
        """Return the live session for a token, dropping it if expired"""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if self._clock() > session.expires_at:
                del self._sessions[token]
                return None
            return session

    def revoke(self, token: str) -> None:
        """Invalidate a session (idempotent)"""
        with self._lock:
            self._sessions.pop(token, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions (call periodically)"""
        now = self._clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if now > s.expires_at]
            for token in expired:
                del self._sessions[token]
        return len(expired)
