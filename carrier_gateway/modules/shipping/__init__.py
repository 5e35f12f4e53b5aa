"""
Shipping Module

- BaseCarrier interface for all carrier implementations
- CarrierRegistry maps carrier codes to configured carriers
"""
from carrier_gateway.modules.shipping.carriers import CarrierRegistry, register_carrier
from carrier_gateway.modules.shipping.carriers.base import BaseCarrier

__all__ = [
    "CarrierRegistry",
    "register_carrier",
    "BaseCarrier",
]
