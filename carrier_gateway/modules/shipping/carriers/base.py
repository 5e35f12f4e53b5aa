"""
Base Carrier Interface

All carriers implement BaseCarrier and return the carrier-agnostic result
types defined here. Results are immutable: a RateQuote is built once from a
carrier line item and never modified afterwards.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from carrier_gateway.models.carrier import CarrierCode, CurrencyCode, LabelFormat
from carrier_gateway.schemas.shipping import LabelRequest, RateRequest


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class MonetaryAmount:
    """Decimal amount with a supported currency."""
    amount: Decimal
    currency: CurrencyCode = CurrencyCode.USD

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": str(self.amount), "currency": self.currency.value}


@dataclass(frozen=True)
class Surcharge:
    """Itemized fee layered on top of the base charge."""
    code: str
    description: str
    amount: MonetaryAmount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "description": self.description,
            "amount": self.amount.to_dict(),
        }


@dataclass(frozen=True)
class RateQuote:
    """One priced service level."""
    carrier_code: CarrierCode
    service_code: str
    service_name: str
    total_price: MonetaryAmount
    base_price: MonetaryAmount
    surcharges: Tuple[Surcharge, ...] = ()
    estimated_delivery_date: Optional[date] = None
    transit_days: Optional[int] = None
    saturday_delivery: bool = False
    guaranteed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "carrier_code": self.carrier_code.value,
            "service_code": self.service_code,
            "service_name": self.service_name,
            "total_price": self.total_price.to_dict(),
            "base_price": self.base_price.to_dict(),
            "surcharges": [s.to_dict() for s in self.surcharges],
            "estimated_delivery_date": (
                self.estimated_delivery_date.isoformat() if self.estimated_delivery_date else None
            ),
            "transit_days": self.transit_days,
            "saturday_delivery": self.saturday_delivery,
            "guaranteed": self.guaranteed,
        }


@dataclass(frozen=True)
class RateResult:
    """
    Outcome of one successful rate call.

    quotes are ordered ascending by total price; equal prices keep the
    carrier's order. warnings lists data the mapper had to default (e.g.
    unknown currency codes).
    """
    request_id: str
    timestamp: datetime
    carrier_code: CarrierCode
    quotes: Tuple[RateQuote, ...]
    original_request: RateRequest
    warnings: Tuple[str, ...] = ()

    @property
    def cheapest(self) -> Optional[RateQuote]:
        return self.quotes[0] if self.quotes else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "carrier_code": self.carrier_code.value,
            "quotes": [q.to_dict() for q in self.quotes],
            "request": self.original_request.model_dump(mode="json", by_alias=True, exclude_none=True),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class TrackingEvent:
    timestamp: datetime
    description: str
    status_code: str
    location: Optional[str] = None


@dataclass(frozen=True)
class TrackingResult:
    tracking_number: str
    status: str
    events: Tuple[TrackingEvent, ...] = ()
    estimated_delivery_date: Optional[date] = None
    actual_delivery_date: Optional[date] = None


@dataclass(frozen=True)
class LabelResult:
    tracking_number: str
    label_data: str  # Base64 encoded
    label_format: LabelFormat
    total_cost: MonetaryAmount


@dataclass
class CarrierOptions:
    """Carrier-level defaults merged into each request's options."""
    account_number: Optional[str] = None
    use_negotiated_rates: bool = False


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    Carriers own their authentication and wire mapping; callers only ever
    see the result types above or a CarrierError.
    """

    @property
    @abstractmethod
    def carrier_code(self) -> CarrierCode:
        """Return the carrier code enum value."""

    @property
    def carrier_name(self) -> str:
        return self.carrier_code.value

    @abstractmethod
    async def rate(self, request: RateRequest) -> RateResult:
        """
        Get shipping rates for a request.

        Raises:
            ValidationError: request failed validation
            AuthenticationError: carrier authentication failed
            RateLimitError: carrier throttled the call
            CarrierApiError: carrier returned an error
            NetworkError: no response from the carrier
        """

    @abstractmethod
    async def track(self, tracking_number: str) -> TrackingResult:
        """Get tracking information for a shipment."""

    @abstractmethod
    async def create_label(self, request: LabelRequest) -> LabelResult:
        """Create a shipment and return its label."""

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""

    def supported_operations(self) -> List[str]:
        return ["rate"]
