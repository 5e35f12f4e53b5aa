from carrier_gateway.models.carrier import (
    CarrierCode,
    CurrencyCode,
    DimensionUnit,
    LabelFormat,
    PackagingType,
    WeightUnit,
    parse_currency_code,
)

__all__ = [
    "CarrierCode",
    "CurrencyCode",
    "DimensionUnit",
    "LabelFormat",
    "PackagingType",
    "WeightUnit",
    "parse_currency_code",
]
