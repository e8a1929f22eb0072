"""Fixed-point-safe rounding for every monetary figure."""
from __future__ import annotations

import math

from ledgerbook.core.errors import ValidationError

# Nudge (in hundredths of a cent) that lifts values such as 1.005, stored as
# 1.00499999…, onto the intended side of the half-cent boundary.
_EPSILON = 1e-6


def round2(value: float | int | str | None) -> float:
    """
    Round to 2 decimals, half away from zero.

    >>> round2(1.005)
    1.01
    >>> round2(-2.675)
    -2.68
    """
    amount = float(value or 0.0)
    cents = math.floor(abs(amount) * 100 + 0.5 + _EPSILON)
    result = cents / 100
    if amount < 0 and cents:
        return -result
    return result


def to_amount(value: float | int | str | None) -> float:
    """Coerce loosely typed input (None, "", "12.5") to a rounded amount."""
    if value is None or value == "":
        return 0.0
    try:
        return round2(float(value))
    except (TypeError, ValueError) as exc:
        raise ValidationError("INVALID_AMOUNT", f"Not an amount: {value!r}") from exc
