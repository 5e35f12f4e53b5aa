"""
UPS request/response mapping

build_rate_request() turns a domain RateRequest into the UPS Rating payload.
UPSResponseMapper turns a successful Rating response into a RateResult.

Mapping rules for each rated shipment:
- total price: negotiated TotalCharge when present, else TotalCharges
- base price: BaseServiceCharge when present, else TransportationCharges
- surcharges: ItemizedCharges with a strictly positive value, carrier order,
  description falling back to the charge code
- transit days: TimeInTransit summary wins over GuaranteedDelivery
- guaranteed: a GuaranteedDelivery block is present at all
UPS alerts (response-level and per service) are carried as warnings.
Bad currency codes and unparseable numbers degrade locally (default currency,
absent field) instead of failing the response.
"""
import logging
import time
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from carrier_gateway.models.carrier import CarrierCode, CurrencyCode, is_known_currency, parse_currency_code
from carrier_gateway.modules.shipping.carriers.base import (
    MonetaryAmount,
    RateQuote,
    RateResult,
    Surcharge,
)
from carrier_gateway.modules.shipping.carriers.ups_constants import (
    PACKAGE_BILL_TYPE_NON_DOCUMENT,
    SATURDAY_DELIVERY_TRUE_VALUES,
    UPS_API_VERSION,
    UPS_DIMENSION_UNITS,
    UPS_PACKAGING_CODES,
    UPS_WEIGHT_UNITS,
    get_service_name,
)
from carrier_gateway.schemas.shipping import Address, Package, RateRequest
from carrier_gateway.schemas.ups import UPSCharge, UPSRatedShipment, UPSRateResponse

logger = logging.getLogger(__name__)


# ==================== Request Mapping ====================


def to_ups_address(address: Address) -> Dict[str, Any]:
    """Convert to UPS API address format."""
    lines = [address.address_line1]
    if address.address_line2:
        lines.append(address.address_line2)
    if address.address_line3:
        lines.append(address.address_line3)

    ups_address: Dict[str, Any] = {
        "AddressLine": lines,
        "City": address.city,
        "StateProvinceCode": address.state_province_code,
        "PostalCode": address.postal_code,
        "CountryCode": address.country_code,
    }
    if address.is_residential:
        ups_address["ResidentialAddressIndicator"] = "Y"
    return ups_address


def to_ups_package(package: Package) -> Dict[str, Any]:
    """Convert to UPS API package format."""
    weight_code, weight_desc = UPS_WEIGHT_UNITS[package.weight.unit]
    ups_package: Dict[str, Any] = {
        "PackagingType": {
            "Code": UPS_PACKAGING_CODES[package.packaging_type],
            "Description": package.packaging_type.value,
        },
        "PackageWeight": {
            "UnitOfMeasurement": {"Code": weight_code, "Description": weight_desc},
            "Weight": f"{package.weight.value:.1f}",
        },
    }

    if package.dimensions:
        dims = package.dimensions
        dim_code, dim_desc = UPS_DIMENSION_UNITS[dims.unit]
        ups_package["Dimensions"] = {
            "UnitOfMeasurement": {"Code": dim_code, "Description": dim_desc},
            "Length": f"{dims.length:.1f}",
            "Width": f"{dims.width:.1f}",
            "Height": f"{dims.height:.1f}",
        }

    if package.declared_value:
        ups_package["PackageServiceOptions"] = {
            "DeclaredValue": {
                "CurrencyCode": package.declared_value.currency.value,
                "MonetaryValue": f"{package.declared_value.amount:.2f}",
            }
        }

    return ups_package


def build_rate_request(
    request: RateRequest,
    account_number: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the UPS Rating payload.

    ``request.options`` is expected to already carry carrier defaults.
    """
    options = request.options
    shop = not (options and options.return_all_services is False)

    shipper: Dict[str, Any] = {"Name": "Shipper", "Address": to_ups_address(request.origin)}
    if account_number:
        shipper["ShipperNumber"] = account_number

    delivery_info: Dict[str, Any] = {"PackageBillType": PACKAGE_BILL_TYPE_NON_DOCUMENT}
    if request.ship_date:
        delivery_info["Pickup"] = {"Date": request.ship_date.replace("-", "")}

    shipment: Dict[str, Any] = {
        "Shipper": shipper,
        "ShipTo": {"Name": "Recipient", "Address": to_ups_address(request.destination)},
        "ShipFrom": {"Name": "Shipper", "Address": to_ups_address(request.origin)},
        "Package": [to_ups_package(p) for p in request.packages],
        "DeliveryTimeInformation": delivery_info,
    }

    if options and options.negotiated_rates:
        shipment["ShipmentRatingOptions"] = {"NegotiatedRatesIndicator": "Y"}

    if not shop and options and options.service_codes and len(options.service_codes) == 1:
        code = options.service_codes[0]
        shipment["Service"] = {"Code": code, "Description": get_service_name(code)}

    if options and options.saturday_delivery:
        shipment["ShipmentServiceOptions"] = {"SaturdayDeliveryIndicator": ""}

    return {
        "RateRequest": {
            "Request": {
                "SubVersion": UPS_API_VERSION,
                "RequestOption": "Shop" if shop else "Rate",
                "TransactionReference": {"CustomerContext": f"rate-{int(time.time() * 1000)}"},
            },
            "Shipment": shipment,
        }
    }


# ==================== Parsing Helpers ====================


def parse_decimal(value: Optional[str]) -> Optional[Decimal]:
    """Parse a UPS MonetaryValue string; None when not a finite number."""
    if value is None:
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer string; None on anything else."""
    if value is None:
        return None
    value = str(value).strip()
    if not value.isdigit():
        return None
    return int(value)


def parse_ups_date(value: Optional[str]) -> Optional[date]:
    """Accept YYYYMMDD (UPS native) or YYYY-MM-DD."""
    if not value:
        return None
    for fmt in ("%Y%m%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex}"


# ==================== Response Mapping ====================


class UPSResponseMapper:
    """
    Maps UPS Rating responses into RateResults.

    Args:
        default_currency: used when UPS reports an unknown currency code
    """

    carrier_code = CarrierCode.UPS

    def __init__(self, default_currency: CurrencyCode = CurrencyCode.USD):
        self.default_currency = default_currency

    def map_rate_response(
        self,
        response: Union[UPSRateResponse, Dict[str, Any]],
        original_request: RateRequest,
    ) -> RateResult:
        """Map every rated shipment and sort by total price (stable)."""
        if not isinstance(response, UPSRateResponse):
            response = UPSRateResponse.model_validate(response)

        warnings: List[str] = [
            f"UPS alert {alert.code}: {alert.description}"
            for alert in response.rate_response.response.alert
        ]
        quotes: List[RateQuote] = []
        for rated in response.rate_response.rated_shipment:
            warnings.extend(
                f"UPS alert {alert.code} on service {rated.service.code}: {alert.description}"
                for alert in rated.rated_shipment_alert
            )
            quote = self.map_rated_shipment(rated, warnings)
            if quote is not None:
                quotes.append(quote)

        quotes.sort(key=lambda q: q.total_price.amount)

        return RateResult(
            request_id=generate_request_id(),
            timestamp=datetime.now(timezone.utc),
            carrier_code=self.carrier_code,
            quotes=tuple(quotes),
            original_request=original_request,
            warnings=tuple(warnings),
        )

    def map_rated_shipment(
        self,
        rated: UPSRatedShipment,
        warnings: Optional[List[str]] = None,
    ) -> Optional[RateQuote]:
        """
        Map one rated shipment.

        Returns None (with a warning) only when the total price is not a number,
        since such a quote cannot be ordered or billed.
        """
        if warnings is None:
            warnings = []
        service_code = rated.service.code
        service_name = rated.service.description or get_service_name(service_code)

        total_charge = (
            rated.negotiated_rate_charges.total_charge
            if rated.negotiated_rate_charges
            else rated.total_charges
        )
        total_price = self._to_amount(total_charge, None, warnings, f"service {service_code} total")
        if total_price is None:
            message = f"Skipping UPS service {service_code}: unparseable total {total_charge.monetary_value!r}"
            logger.warning(message)
            warnings.append(message)
            return None

        base_charge = rated.base_service_charge or rated.transportation_charges
        base_price = self._to_amount(
            base_charge, total_charge.currency_code, warnings, f"service {service_code} base"
        )
        if base_price is None:
            message = f"UPS service {service_code}: unparseable base charge {base_charge.monetary_value!r}"
            logger.warning(message)
            warnings.append(message)
            base_price = MonetaryAmount(Decimal("0"), total_price.currency)

        surcharges = []
        for charge in rated.itemized_charges:
            amount = parse_decimal(charge.monetary_value)
            if amount is None or amount <= 0:
                continue
            currency = self._currency(charge.currency_code, warnings, f"surcharge {charge.code}")
            surcharges.append(Surcharge(
                code=charge.code,
                description=charge.description or charge.code,
                amount=MonetaryAmount(amount, currency),
            ))

        transit_days: Optional[int] = None
        estimated_delivery_date: Optional[date] = None
        saturday_delivery = False

        if rated.guaranteed_delivery:
            transit_days = parse_int(rated.guaranteed_delivery.business_days_in_transit)

        summary = rated.time_in_transit.service_summary if rated.time_in_transit else None
        if summary:
            arrival = summary.estimated_arrival
            if arrival and arrival.arrival and arrival.arrival.date:
                estimated_delivery_date = parse_ups_date(arrival.arrival.date)
            if arrival and arrival.business_days_in_transit:
                transit_days = parse_int(arrival.business_days_in_transit)
            saturday_delivery = summary.saturday_delivery in SATURDAY_DELIVERY_TRUE_VALUES

        return RateQuote(
            carrier_code=self.carrier_code,
            service_code=service_code,
            service_name=service_name,
            total_price=total_price,
            base_price=base_price,
            surcharges=tuple(surcharges),
            estimated_delivery_date=estimated_delivery_date,
            transit_days=transit_days,
            saturday_delivery=saturday_delivery,
            guaranteed=rated.guaranteed_delivery is not None,
        )

    def _to_amount(
        self,
        charge: UPSCharge,
        fallback_currency_code: Optional[str],
        warnings: List[str],
        label: str,
    ) -> Optional[MonetaryAmount]:
        amount = parse_decimal(charge.monetary_value)
        if amount is None:
            return None
        currency_code = charge.currency_code or fallback_currency_code
        return MonetaryAmount(amount, self._currency(currency_code, warnings, label))

    def _currency(self, code: Optional[str], warnings: List[str], label: str) -> CurrencyCode:
        if not is_known_currency(code):
            warnings.append(f"Unknown currency code {code!r} on {label}; defaulted to {self.default_currency.value}")
        return parse_currency_code(code, self.default_currency)
