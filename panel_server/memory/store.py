"""
In-memory session store for the login gate.

Sessions live only in this process; a restart logs everyone out.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

from ..models import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Process-local table of session tokens to session records."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get(self, token: str) -> Optional[Session]:
        """
        Look up a session and mark it active.

        Args:
            token: Session token from the cookie

        Returns:
            Session, or None if the token is unknown
        """
        session = self._sessions.get(token)
        if session is not None:
            session.last_active = datetime.utcnow()
        return session

    def set(self, token: str, authenticated: bool) -> Session:
        """Create or update the session stored under ``token``."""
        now = datetime.utcnow()
        session = self._sessions.get(token)
        if session is None:
            session = Session(token=token, authenticated=authenticated, created_at=now, last_active=now)
            self._sessions[token] = session
        else:
            session.authenticated = authenticated
            session.last_active = now
        return session

    def delete(self, token: str) -> bool:
        """
        Delete a session.

        Returns:
            True if session was deleted, False if not found
        """
        deleted = self._sessions.pop(token, None) is not None
        if deleted:
            logger.info("Deleted session")
        return deleted

    def create_session(self, authenticated: bool = False) -> str:
        """
        Create a new session under a fresh random token.

        Returns:
            The session token
        """
        token = secrets.token_urlsafe(32)
        self.set(token, authenticated)
        logger.info(f"Created session (authenticated={authenticated})")
        return token

    def is_authenticated(self, token: Optional[str]) -> bool:
        if not token:
            return False
        session = self.get(token)
        return session is not None and session.authenticated

    def cleanup_expired(self, timeout_minutes: int = 60) -> int:
        """
        Delete sessions that have been inactive for longer than timeout.

        Args:
            timeout_minutes: Inactivity timeout in minutes

        Returns:
            Number of sessions deleted
        """
        cutoff = datetime.utcnow() - timedelta(minutes=timeout_minutes)
        expired = [token for token, s in self._sessions.items() if s.last_active < cutoff]
        for token in expired:
            del self._sessions[token]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
