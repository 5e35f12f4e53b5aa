"""
UPS constants

Service names, packaging codes and API paths.
Reference: https://developer.ups.com/api/reference/rating
"""
from carrier_gateway.models.carrier import DimensionUnit, PackagingType, WeightUnit

UPS_SERVICE_CODES = {
    # Domestic (US)
    "01": "UPS Next Day Air",
    "02": "UPS 2nd Day Air",
    "03": "UPS Ground",
    "12": "UPS 3 Day Select",
    "13": "UPS Next Day Air Saver",
    "14": "UPS Next Day Air Early",
    "59": "UPS 2nd Day Air A.M.",
    # International
    "07": "UPS Worldwide Express",
    "08": "UPS Worldwide Expedited",
    "11": "UPS Standard",
    "54": "UPS Worldwide Express Plus",
    "65": "UPS Saver",
    "96": "UPS Worldwide Express Freight",
    # Same day
    "82": "UPS Today Standard",
    "83": "UPS Today Dedicated Courier",
    "84": "UPS Today Intercity",
    "85": "UPS Today Express",
    "86": "UPS Today Express Saver",
}

UPS_PACKAGING_CODES = {
    PackagingType.CUSTOM: "02",       # Customer Supplied Package
    PackagingType.LETTER: "01",       # UPS Letter
    PackagingType.TUBE: "03",
    PackagingType.PAK: "04",
    PackagingType.SMALL_BOX: "2a",    # Small Express Box
    PackagingType.MEDIUM_BOX: "2b",
    PackagingType.LARGE_BOX: "2c",
}

UPS_WEIGHT_UNITS = {
    WeightUnit.LB: ("LBS", "Pounds"),
    WeightUnit.KG: ("KGS", "Kilograms"),
}

UPS_DIMENSION_UNITS = {
    DimensionUnit.IN: ("IN", "Inches"),
    DimensionUnit.CM: ("CM", "Centimeters"),
}

# API paths
RATE_SHOP_PATH = "/api/rating/v2403/Shop"  # all services
RATE_PATH = "/api/rating/v2403/Rate"       # single service

UPS_API_VERSION = "2403"

# ResponseStatus.Code for a successful call
UPS_SUCCESS_STATUS = "1"

# Package bill type for non-document shipments
PACKAGE_BILL_TYPE_NON_DOCUMENT = "03"

# Saturday delivery flag encodings UPS uses
SATURDAY_DELIVERY_TRUE_VALUES = ("Y", "1")

TRANSACTION_SOURCE = "carrier-gateway"


def get_service_name(code: str) -> str:
    """Human-readable name for a UPS service code."""
    return UPS_SERVICE_CODES.get(code, f"UPS Service {code}")
