"""Coercion of user-typed numeric input (quantity, price, tax rate)."""

import math
import re
from decimal import Decimal
from typing import Any

# Leading numeric prefix, same shape a browser number parser accepts:
# optional sign, digits with optional fraction (or a bare fraction), optional exponent.
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_number(value: Any) -> float:
    """Coerce form input to a float, falling back to 0.

    Rules:
    - int/float/Decimal pass through as float
    - Strings are trimmed and parsed by their leading numeric prefix
      ("12abc" -> 12.0, " 3.5 " -> 3.5, "1e2" -> 100.0)
    - None, booleans, empty strings, text without a numeric prefix, NaN,
      infinities and integers too large for a float -> 0.0

    Never raises; malformed input is silently treated as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            # Integers beyond float range, signaling NaN
            return 0.0
    else:
        match = _NUMERIC_PREFIX.match(str(value).strip())
        if not match:
            return 0.0
        number = float(match.group(0))

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number
