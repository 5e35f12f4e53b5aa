"""
Shipping Service

Carrier-agnostic entry point:
- rate() dispatches a request to one registered carrier
- rate_all() rates every registered carrier concurrently and merges the
  quotes into one price-sorted list, keeping per-carrier errors alongside

Usage:
    service = ShippingService(CarrierRegistry([create_ups_carrier(settings)]))
    result = await service.rate(CarrierCode.UPS, request)
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from carrier_gateway.core.exceptions import CarrierError
from carrier_gateway.models.carrier import CarrierCode
from carrier_gateway.modules.shipping.carriers import CarrierRegistry
from carrier_gateway.modules.shipping.carriers.base import RateQuote, RateResult
from carrier_gateway.schemas.shipping import RateRequest, validate_rate_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MultiCarrierRateResult:
    """Quotes from every carrier that answered, plus the errors of those that did not."""
    timestamp: datetime
    quotes: Tuple[RateQuote, ...]
    results: Dict[CarrierCode, RateResult] = field(default_factory=dict)
    errors: Dict[CarrierCode, CarrierError] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "quotes": [q.to_dict() for q in self.quotes],
            "request_ids": {code.value: r.request_id for code, r in self.results.items()},
            "errors": {code.value: e.to_dict() for code, e in self.errors.items()},
        }


class ShippingService:
    """Routes rate requests to carriers held in a CarrierRegistry."""

    def __init__(self, registry: CarrierRegistry):
        self.registry = registry

    async def rate(
        self,
        carrier_code: CarrierCode,
        request: Union[RateRequest, Mapping[str, Any]],
    ) -> RateResult:
        """
        Rate a shipment with one carrier.

        Raises:
            NotImplementedCarrierError: carrier is not registered
            CarrierError: whatever the carrier raised
        """
        carrier = self.registry.require(carrier_code)
        return await carrier.rate(request)

    async def rate_all(
        self,
        request: Union[RateRequest, Mapping[str, Any]],
        carriers: Optional[List[CarrierCode]] = None,
    ) -> MultiCarrierRateResult:
        """
        Rate a shipment with every registered carrier (or the given subset).

        A CarrierError from one carrier is recorded and does not affect the
        others. Any other exception is a bug and is re-raised.
        """
        request = validate_rate_request(request)
        codes = carriers if carriers is not None else self.registry.codes()
        targets = [self.registry.require(code) for code in codes]

        outcomes = await asyncio.gather(
            *(carrier.rate(request) for carrier in targets),
            return_exceptions=True,
        )

        results: Dict[CarrierCode, RateResult] = {}
        errors: Dict[CarrierCode, CarrierError] = {}
        quotes: List[RateQuote] = []

        for carrier, outcome in zip(targets, outcomes):
            code = carrier.carrier_code
            if isinstance(outcome, CarrierError):
                logger.warning(f"Rate from {code.value} failed: {outcome.code} - {outcome.message}")
                errors[code] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[code] = outcome
                quotes.extend(outcome.quotes)

        quotes.sort(key=lambda q: q.total_price.amount)

        logger.info(
            f"Multi-carrier rate: {len(quotes)} quotes from {len(results)} carriers, "
            f"{len(errors)} failed"
        )
        return MultiCarrierRateResult(
            timestamp=datetime.now(timezone.utc),
            quotes=tuple(quotes),
            results=results,
            errors=errors,
        )

    async def close(self):
        """Close all carrier transports."""
        await self.registry.close()
