"""
Numeric input helpers shared by the calculators and the validator.
"""

import math
from decimal import Decimal
from numbers import Real
from typing import Any


def is_finite_number(value: Any) -> bool:
    """True for real, finite, non-boolean numbers."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (Real, Decimal)):
        return False
    return math.isfinite(float(value))


def format_value(value: float) -> str:
    """
    Render a number at its input precision.

    Integral values drop the trailing '.0'; everything else uses the shortest
    representation that round-trips, so nothing is rounded away.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
