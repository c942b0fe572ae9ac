"""
Error taxonomy for the panel server.

Every error raised on the request path derives from PanelError and is rendered
by a single FastAPI exception handler as ``{"ok": false, "error": ...}``.
Upstream application errors (vendor answered with a failure code) are not
represented here: they are relayed to the caller verbatim.
"""
from typing import Any, Dict, Optional


class PanelError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"ok": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ConfigurationError(PanelError):
    """Server is missing required configuration (e.g. the vendor API key)."""

    status_code = 500


class InvalidRequestError(PanelError):
    """Inbound request is missing fields or carries malformed values."""

    status_code = 400


class AuthenticationError(PanelError):
    """Login failed or the request carries no authenticated session."""

    status_code = 401


class UpstreamUnavailableError(PanelError):
    """The vendor cloud could not be reached (DNS, connection, timeout)."""

    status_code = 502

    def __init__(self, details: str):
        super().__init__("Upstream error", details=details)
