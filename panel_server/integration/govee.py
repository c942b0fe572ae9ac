"""
Govee cloud client for device listing, state and control.
"""
import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Optional

import aiohttp

from ..config import settings
from ..errors import UpstreamUnavailableError
from ..models import CapabilityCommand, DeviceRef, VendorResponse
from .base import VendorClient, describe
from .variants import PayloadVariant

logger = logging.getLogger(__name__)

RAW_SNIPPET_LIMIT = 2000


def parse_body(text: str) -> VendorResponse:
    """
    Best-effort JSON parse of a vendor response body.

    Never raises: a non-JSON body is returned as
    ``{"parseError": ..., "raw": <first 2000 chars>}`` with ``parsed=False``.
    The status is filled in by the caller.
    """
    if not text:
        return VendorResponse(status=0, body={})
    try:
        data = json.loads(text)
    except ValueError as e:
        return VendorResponse(
            status=0,
            body={"parseError": str(e), "raw": text[:RAW_SNIPPET_LIMIT]},
            parsed=False,
        )
    if not isinstance(data, dict):
        data = {"data": data}
    return VendorResponse(status=0, body=data)


def new_request_id() -> str:
    return str(uuid.uuid4())


class GoveeClient(VendorClient):
    """Client for the Govee OpenAPI router endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(api_key)
        self.base_url = (base_url or settings.govee_api_base).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else settings.request_timeout
        )
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    "Content-Type": "application/json",
                    "Govee-API-Key": self.api_key,
                },
                timeout=self.timeout,
            )
        return self.session

    async def close(self) -> None:
        """Close aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> VendorResponse:
        """
        Issue one vendor call and normalize the outcome.

        Raises:
            UpstreamUnavailableError: On DNS, connection or timeout failures
        """
        url = f"{self.base_url}{path}"
        session = await self._get_session()
        try:
            async with session.request(method, url, json=json_body, params=params) as response:
                text = (await response.read()).decode("utf-8", errors="replace")
                result = parse_body(text)
                result.status = response.status
                result.headers = dict(response.headers)
                result.url = str(response.url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Vendor call {method} {path} failed: {e!r}")
            raise UpstreamUnavailableError(repr(e)) from e

        if not result.parsed:
            logger.warning(f"Vendor call {method} {path} returned non-JSON body (status={result.status})")
        logger.debug(f"Vendor call {method} {path} -> {result.status} code={result.body.get('code')}")
        return result

    async def list_devices(self) -> VendorResponse:
        """List devices on the account."""
        return await self._request("GET", "/user/devices")

    async def fetch_state(self, device_ref: DeviceRef, variant: PayloadVariant) -> VendorResponse:
        """Query one device's state with the given payload shape."""
        envelope = {"requestId": new_request_id(), "payload": variant.build(device_ref)}
        logger.debug(f"State request for {device_ref.device} ({variant.value})")
        return await self._request("POST", "/device/state", json_body=envelope)

    async def send_control(
        self,
        device_ref: DeviceRef,
        capability: CapabilityCommand,
        variant: PayloadVariant,
    ) -> VendorResponse:
        """Send one capability command with the given payload shape."""
        envelope = {"requestId": new_request_id(), "payload": variant.build(device_ref, capability)}
        logger.debug(f"Control request for {device_ref.device}: {describe(capability)} ({variant.value})")
        return await self._request("POST", "/device/control", json_body=envelope)

    async def fetch_state_get(self, device_ref: DeviceRef) -> VendorResponse:
        """Raw GET of the state endpoint, used by the debug route."""
        return await self._request(
            "GET",
            "/device/state",
            params={"device": device_ref.device, "sku": device_ref.sku},
        )
