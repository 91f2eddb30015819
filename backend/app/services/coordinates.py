"""
Fixed-point coordinate helpers.

Storage keeps 8 fractional digits; display (API projections and SMS text)
uses 4. Everything goes through ``Decimal`` so no float drift creeps in.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

STORAGE_QUANTUM = Decimal("0.00000001")
DISPLAY_QUANTUM = Decimal("0.0001")


def to_decimal(value: Any) -> Decimal:
    """Coerce a str/int/float/Decimal coordinate to ``Decimal``."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr of a float is its shortest round-tripping form
        return Decimal(repr(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid coordinate: {value!r}")


def quantize_coordinate(value: Any) -> Decimal:
    """Round to the 8-digit storage precision."""
    return to_decimal(value).quantize(STORAGE_QUANTUM, rounding=ROUND_HALF_UP)


def format_coordinate(value: Any) -> str:
    """
    Format a coordinate for display with exactly 4 fractional digits.

    >>> format_coordinate("-74.00600000")
    '-74.0060'
    """
    if value is None:
        return "0.0000"
    return str(to_decimal(value).quantize(DISPLAY_QUANTUM, rounding=ROUND_HALF_UP))
