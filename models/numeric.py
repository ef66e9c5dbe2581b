"""
Numeric coercion helpers.

The engine must keep producing a usable hazard estimate from bad
telemetry, so inputs are coerced to documented defaults instead of
raising.  Every helper here is total: it never raises and never returns
NaN or infinity unless explicitly given one as a fallback.
"""

import math
from typing import Any, Optional


def safe_number(
    value: Any,
    fallback: float,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> float:
    """
    Coerce *value* to a finite float.

    ``None``, empty strings, unparseable strings, booleans, NaN and
    infinities all resolve to *fallback*.  Finite values outside
    ``[min_value, max_value]`` are clamped to the nearest bound.

    Args:
        value: Raw input (number, numeric string, or anything else).
        fallback: Value used when *value* is missing or not finite.
        min_value: Optional lower bound.
        max_value: Optional upper bound.

    Returns:
        A finite float.
    """
    if value is None or isinstance(value, bool):
        return fallback
    try:
        num = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(num):
        return fallback
    if min_value is not None and num < min_value:
        return min_value
    if max_value is not None and num > max_value:
        return max_value
    return num


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp *value* into ``[lower, upper]``."""
    return min(max(value, lower), upper)


def round_to(value: float, decimals: int = 0) -> float:
    """Round half away from zero, matching how results are reported."""
    factor = 10.0 ** decimals
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value) if value != 0 else 0.0


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    """True if (lat, lng) are finite numbers inside the valid WGS84 range."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def all_finite(*values: float) -> bool:
    """True if every value is a finite number."""
    return all(math.isfinite(v) for v in values)
