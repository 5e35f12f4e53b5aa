"""
Shipping request schemas

Pydantic models for inbound rate and label requests. Field names are
snake_case in Python and accept camelCase on input so JSON payloads from
the API edge validate as-is.
"""
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from carrier_gateway.core.exceptions import ValidationError
from carrier_gateway.models.carrier import (
    CarrierCode,
    CurrencyCode,
    DimensionUnit,
    LabelFormat,
    PackagingType,
    WeightUnit,
)

MAX_PACKAGES = 25
MAX_WEIGHT = 150
MAX_DIMENSION = 108


class ShippingModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ==================== Address Schemas ====================


class Address(ShippingModel):
    address_line1: str = Field(..., min_length=1, max_length=100)
    address_line2: Optional[str] = Field(None, max_length=100)
    address_line3: Optional[str] = Field(None, max_length=100)
    city: str = Field(..., min_length=1, max_length=50)
    state_province_code: str = Field(..., min_length=2, max_length=5)
    postal_code: str = Field(..., min_length=3, max_length=15, pattern=r"^[A-Za-z0-9\s-]+$")
    country_code: str = Field(..., pattern=r"^[A-Z]{2}$")
    is_residential: Optional[bool] = None


# ==================== Package Schemas ====================


class PackageWeight(ShippingModel):
    value: float = Field(..., gt=0, le=MAX_WEIGHT)
    unit: WeightUnit


class PackageDimensions(ShippingModel):
    length: float = Field(..., gt=0, le=MAX_DIMENSION)
    width: float = Field(..., gt=0, le=MAX_DIMENSION)
    height: float = Field(..., gt=0, le=MAX_DIMENSION)
    unit: DimensionUnit


class MonetaryValueIn(ShippingModel):
    """Declared value on an inbound package."""
    amount: float = Field(..., ge=0)
    currency: CurrencyCode


class Package(ShippingModel):
    weight: PackageWeight
    dimensions: Optional[PackageDimensions] = None
    packaging_type: PackagingType = PackagingType.CUSTOM
    declared_value: Optional[MonetaryValueIn] = None
    reference: Optional[str] = Field(None, max_length=50)


# ==================== Rate Schemas ====================


class RateRequestOptions(ShippingModel):
    service_codes: Optional[List[str]] = None
    saturday_delivery: Optional[bool] = None
    negotiated_rates: Optional[bool] = None
    return_all_services: Optional[bool] = None

    @field_validator("service_codes")
    @classmethod
    def validate_service_codes(cls, v):
        if v is not None and any(not code for code in v):
            raise ValueError("Service codes must be non-empty")
        return v


class RateRequest(ShippingModel):
    origin: Address
    destination: Address
    packages: List[Package] = Field(..., min_length=1, max_length=MAX_PACKAGES)
    ship_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    options: Optional[RateRequestOptions] = None


# ==================== Label Schemas ====================


class LabelRequest(ShippingModel):
    origin: Address
    destination: Address
    packages: List[Package] = Field(..., min_length=1, max_length=MAX_PACKAGES)
    service_code: str = Field(..., min_length=1)
    carrier: CarrierCode
    label_format: Optional[LabelFormat] = None


# ==================== Validation Helpers ====================


def errors_to_field_errors(error: PydanticValidationError) -> Dict[str, List[str]]:
    """Convert pydantic errors into a dotted-path -> messages map."""
    field_errors: Dict[str, List[str]] = {}
    for issue in error.errors():
        key = ".".join(str(part) for part in issue["loc"]) or "_root"
        field_errors.setdefault(key, []).append(issue["msg"])
    return field_errors


def _validate(model: type, data: Any, what: str, carrier: Optional[str]):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {what}",
            field_errors=errors_to_field_errors(e),
            carrier=carrier,
            cause=e,
        ) from e


def validate_rate_request(
    data: Union[RateRequest, Mapping[str, Any]],
    carrier: Optional[str] = None,
) -> RateRequest:
    """
    Validate an inbound rate request.

    Raises:
        ValidationError: with per-field messages
    """
    return _validate(RateRequest, data, "rate request", carrier)


def validate_label_request(
    data: Union[LabelRequest, Mapping[str, Any]],
    carrier: Optional[str] = None,
) -> LabelRequest:
    return _validate(LabelRequest, data, "label request", carrier)
