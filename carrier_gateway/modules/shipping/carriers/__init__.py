"""
Carrier Registry

- @register_carrier records carrier implementation classes by CarrierCode
- CarrierRegistry holds configured carrier instances for one process
New carriers register themselves here; the orchestration code never changes.
"""
import logging
from typing import Dict, List, Optional, Type

from carrier_gateway.core.exceptions import NotImplementedCarrierError
from carrier_gateway.models.carrier import CarrierCode
from carrier_gateway.modules.shipping.carriers.base import BaseCarrier

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_CLASSES: Dict[CarrierCode, Type[BaseCarrier]] = {}


def register_carrier(carrier_code: CarrierCode):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier(CarrierCode.UPS)
        class UPSCarrier(BaseCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_CLASSES[carrier_code] = cls
        logger.info(f"Registered carrier: {carrier_code.value} -> {cls.__name__}")
        return cls
    return decorator


def get_carrier_class(carrier_code: CarrierCode) -> Optional[Type[BaseCarrier]]:
    return _CARRIER_CLASSES.get(carrier_code)


def implemented_carriers() -> List[CarrierCode]:
    """Carrier codes with a registered implementation class."""
    return list(_CARRIER_CLASSES.keys())


class CarrierRegistry:
    """Maps carrier identity to a configured carrier instance."""

    def __init__(self, carriers: Optional[List[BaseCarrier]] = None):
        self._carriers: Dict[CarrierCode, BaseCarrier] = {}
        for carrier in carriers or []:
            self.register(carrier)

    def register(self, carrier: BaseCarrier) -> None:
        """
        Add a carrier instance.

        Raises:
            ValueError: a carrier with the same code is already registered
        """
        code = carrier.carrier_code
        if code in self._carriers:
            raise ValueError(f"Carrier {code.value} is already registered")
        self._carriers[code] = carrier
        logger.debug(f"Carrier instance registered: {code.value}")

    def get(self, carrier_code: CarrierCode) -> Optional[BaseCarrier]:
        return self._carriers.get(carrier_code)

    def require(self, carrier_code: CarrierCode) -> BaseCarrier:
        """
        Get a carrier or fail with a typed error.

        Raises:
            NotImplementedCarrierError: no instance registered for the code
        """
        carrier = self._carriers.get(carrier_code)
        if carrier is None:
            raise NotImplementedCarrierError(
                "rate",
                carrier=carrier_code.value,
                context={"registered": [c.value for c in self._carriers]},
            )
        return carrier

    def has(self, carrier_code: CarrierCode) -> bool:
        return carrier_code in self._carriers

    def all(self) -> List[BaseCarrier]:
        return list(self._carriers.values())

    def codes(self) -> List[CarrierCode]:
        return list(self._carriers.keys())

    async def close(self) -> None:
        for carrier in self._carriers.values():
            await carrier.close()


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from carrier_gateway.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
