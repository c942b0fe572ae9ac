"""
Payload variant resolution for the vendor state and control endpoints.

The vendor accepts two mutually exclusive payload shapes for the same
operation depending on account generation, and neither the documentation
nor the HTTP status says which one applies:

    flat:   {"device": "<id>", "sku": "<model>", "capability": {...}}
    nested: {"device": {"device": "<id>", "sku": "<model>"}, "capability": {...}}

Requests go out flat first. If that attempt is not a full success (HTTP 200
and body code 200) the nested shape is sent exactly once and its result
becomes the outcome, even when it fails too.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from ..models import CapabilityCommand, DeviceRef, VendorResponse
from .base import describe

logger = logging.getLogger(__name__)


class PayloadVariant(str, Enum):
    """Supported vendor payload shapes."""
    FLAT = "flat"
    NESTED = "nested"

    def build(
        self,
        device_ref: DeviceRef,
        capability: Optional[CapabilityCommand] = None,
    ) -> Dict[str, Any]:
        """Shape the inner ``payload`` object for this variant."""
        if self is PayloadVariant.FLAT:
            payload: Dict[str, Any] = device_ref.to_dict()
        else:
            payload = {"device": device_ref.to_dict()}
        if capability is not None:
            payload["capability"] = capability.to_dict()
        return payload


# Attempt order: flat first, nested as the single fallback.
ATTEMPT_ORDER = (PayloadVariant.FLAT, PayloadVariant.NESTED)


@dataclass
class VariantOutcome:
    """Result of a vendor call resolved across payload shapes."""
    response: VendorResponse
    variant: PayloadVariant
    first_attempt: Optional[VendorResponse] = None

    @property
    def fallback_used(self) -> bool:
        return self.first_attempt is not None

    def to_body(self, include_first_attempt: bool = True) -> Dict[str, Any]:
        """
        Relayed vendor body tagged with the variant that produced it.

        Tags are only added under keys the vendor body does not already use;
        vendor fields are relayed unchanged.
        """
        body = dict(self.response.body)
        body.setdefault("variant", self.variant.value)
        body.setdefault("fallback", self.fallback_used)
        if include_first_attempt and self.first_attempt is not None:
            body.setdefault("firstAttempt", self.first_attempt.to_dict())
        return body


async def resolve(
    call: Callable[[PayloadVariant], Awaitable[VendorResponse]],
    label: str = "",
) -> VariantOutcome:
    """
    Run ``call`` with the primary variant and, if needed, the fallback.

    Args:
        call: Coroutine function issuing one vendor request for a variant
        label: Context for log lines

    Returns:
        VariantOutcome holding the response used as the final result
    """
    primary, fallback = ATTEMPT_ORDER
    first = await call(primary)
    if first.ok:
        return VariantOutcome(response=first, variant=primary)

    logger.info(
        f"{label}: {primary.value} payload not accepted "
        f"(status={first.status}, code={first.body.get('code')}), retrying {fallback.value}"
    )
    second = await call(fallback)
    if not second.ok:
        logger.warning(
            f"{label}: {fallback.value} payload also failed "
            f"(status={second.status}, code={second.body.get('code')})"
        )
    return VariantOutcome(response=second, variant=fallback, first_attempt=first)


async def fetch_state(client, device_ref: DeviceRef) -> VariantOutcome:
    """Query the state endpoint for a device, falling back to the nested shape."""
    return await resolve(
        lambda variant: client.fetch_state(device_ref, variant),
        label=f"state {device_ref.sku}/{device_ref.device}",
    )


async def send_control(
    client,
    device_ref: DeviceRef,
    capability: CapabilityCommand,
) -> VariantOutcome:
    """Send one capability command, falling back to the nested shape."""
    return await resolve(
        lambda variant: client.send_control(device_ref, capability, variant),
        label=f"control {device_ref.sku}/{device_ref.device} {describe(capability)}",
    )
