"""
Carrier domain enums

Shared codes for carriers, currencies, units and packaging.
"""
import enum
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CarrierCode(str, enum.Enum):
    """
    Supported shipping carriers.

    Only UPS has an implementation today; the others are reserved so the
    registry and error payloads can name them.
    """
    UPS = "UPS"
    FEDEX = "FEDEX"
    USPS = "USPS"
    DHL = "DHL"


class CurrencyCode(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"


class WeightUnit(str, enum.Enum):
    LB = "LB"
    KG = "KG"


class DimensionUnit(str, enum.Enum):
    IN = "IN"
    CM = "CM"


class PackagingType(str, enum.Enum):
    CUSTOM = "CUSTOM"
    LETTER = "LETTER"
    TUBE = "TUBE"
    PAK = "PAK"
    SMALL_BOX = "SMALL_BOX"
    MEDIUM_BOX = "MEDIUM_BOX"
    LARGE_BOX = "LARGE_BOX"


class LabelFormat(str, enum.Enum):
    PDF = "PDF"
    PNG = "PNG"
    ZPL = "ZPL"


def parse_currency_code(
    code: Optional[str],
    default: CurrencyCode = CurrencyCode.USD,
) -> CurrencyCode:
    """
    Parse a carrier-reported currency code without ever raising.

    Unknown or missing codes fall back to ``default`` and are logged so that
    unexpected currencies show up in monitoring.
    """
    if code:
        try:
            return CurrencyCode(code.strip().upper())
        except ValueError:
            pass
    logger.warning(f"Unknown currency code: {code!r}, defaulting to {default.value}")
    return default


def is_known_currency(code: Optional[str]) -> bool:
    if not code:
        return False
    return code.strip().upper() in CurrencyCode.__members__
