"""
Base vendor client layer.
All cloud clients should inherit from VendorClient.
"""
from abc import ABC, abstractmethod
from typing import Optional
from ..models import CapabilityCommand, DeviceRef, VendorResponse


class VendorClient(ABC):
    """Abstract base class for vendor cloud clients."""

    def __init__(self, api_key: str):
        """Initialize the client with the vendor API key."""
        self.api_key = api_key
        self.name = self.__class__.__name__

    @abstractmethod
    async def list_devices(self) -> VendorResponse:
        """
        List the devices registered on the vendor account.

        Returns:
            VendorResponse with the relayed status and body

        Raises:
            UpstreamUnavailableError: If the vendor cannot be reached
        """
        pass

    @abstractmethod
    async def fetch_state(self, device_ref: DeviceRef, variant) -> VendorResponse:
        """
        Fetch the current state of one device.

        Args:
            device_ref: Device to query
            variant: PayloadVariant used to shape the request payload
        """
        pass

    @abstractmethod
    async def send_control(
        self,
        device_ref: DeviceRef,
        capability: CapabilityCommand,
        variant,
    ) -> VendorResponse:
        """
        Submit one capability command for a device.

        Args:
            device_ref: Device to control
            capability: Capability descriptor to write
            variant: PayloadVariant used to shape the request payload
        """
        pass

    async def close(self) -> None:
        """Release network resources. Override when the client holds any."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def describe(capability: Optional[CapabilityCommand]) -> str:
    """Short log label for a capability, or 'state' for reads."""
    if capability is None:
        return "state"
    return f"{capability.instance}={capability.value!r}"
