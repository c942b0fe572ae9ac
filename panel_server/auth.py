"""
Session gate: single shared operator credential.

A successful login creates an authenticated session in the SessionStore and
hands the browser a cookie of the form ``<token>.<hmac>``. The signature is
keyed by the session secret, so a forged or edited cookie never matches a
session.
"""
import hashlib
import hmac
import logging
from typing import Optional

from .errors import AuthenticationError
from .memory import SessionStore

logger = logging.getLogger(__name__)


def sign_token(token: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), token.encode(), hashlib.sha256).hexdigest()
    return f"{token}.{digest}"


def unsign_token(value: Optional[str], secret: str) -> Optional[str]:
    """Return the token inside a signed cookie value, or None if it does not verify."""
    if not value or "." not in value:
        return None
    token, _, digest = value.rpartition(".")
    expected = hmac.new(secret.encode(), token.encode(), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(digest, expected):
        return None
    return token


def credentials_match(
    username: Optional[str],
    password: Optional[str],
    expected_username: str,
    expected_password: Optional[str],
) -> bool:
    """Exact match against the configured credentials. An unset password never matches."""
    if not expected_password or username is None or password is None:
        return False
    user_ok = hmac.compare_digest(username.encode(), expected_username.encode())
    pass_ok = hmac.compare_digest(password.encode(), expected_password.encode())
    return user_ok and pass_ok


class SessionGate:
    """Login/logout and authentication checks on top of a SessionStore."""

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        username: str,
        password: Optional[str],
        timeout_minutes: int = 60,
    ):
        self.store = store
        self.secret = secret
        self.username = username
        self.password = password
        self.timeout_minutes = timeout_minutes

    def login(self, username: Optional[str], password: Optional[str]) -> str:
        """
        Authenticate the operator and open a session.

        Returns:
            Signed cookie value for the new session

        Raises:
            AuthenticationError: If the credentials do not match
        """
        if not credentials_match(username, password, self.username, self.password):
            logger.warning(f"Failed login attempt for user {username!r}")
            raise AuthenticationError("Invalid username or password")
        token = self.store.create_session(authenticated=True)
        logger.info(f"User {username!r} logged in")
        return sign_token(token, self.secret)

    def logout(self, cookie_value: Optional[str]) -> None:
        token = unsign_token(cookie_value, self.secret)
        if token:
            self.store.delete(token)

    def is_authenticated(self, cookie_value: Optional[str]) -> bool:
        token = unsign_token(cookie_value, self.secret)
        if token is None:
            return False
        self.store.cleanup_expired(timeout_minutes=self.timeout_minutes)
        return self.store.is_authenticated(token)
