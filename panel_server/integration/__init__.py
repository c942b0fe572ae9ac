"""
Vendor cloud integration layer.
"""
from .base import VendorClient
from .govee import GoveeClient
from .variants import PayloadVariant, VariantOutcome

__all__ = ["VendorClient", "GoveeClient", "PayloadVariant", "VariantOutcome"]
