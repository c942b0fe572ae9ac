"""
Data models for device references, capability commands and vendor responses.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel


@dataclass(frozen=True)
class DeviceRef:
    """Vendor device identifier plus product model code."""
    device: str
    sku: str

    def to_dict(self) -> Dict[str, str]:
        return {"device": self.device, "sku": self.sku}


@dataclass(frozen=True)
class CapabilityCommand:
    """A single vendor capability write: (type, instance) addressed value."""
    type: str
    instance: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "instance": self.instance, "value": self.value}


@dataclass
class VendorResponse:
    """
    HTTP status and body of one vendor call.

    ``parsed`` is False when the body was not JSON; ``body`` then holds
    ``{"parseError": ..., "raw": ...}`` instead of the vendor payload.
    ``url`` is the full URL that was requested, query string included.
    """
    status: int
    body: Dict[str, Any]
    parsed: bool = True
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        """Vendor success requires HTTP 200 and a body code of 200."""
        return self.status == 200 and self.body.get("code") == 200

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "body": self.body}


@dataclass
class Session:
    """Server-side session record."""
    token: str
    authenticated: bool
    created_at: datetime
    last_active: datetime


class LoginRequest(BaseModel):
    """Credentials posted to /api/login."""
    username: Optional[str] = None
    password: Optional[str] = None
