"""Unit and name normalization shared by every quantity calculation."""

import math
from decimal import ROUND_HALF_UP, Decimal

PANTRY_PLACES = 3
HUNDREDTHS = 2


def normalize_unit(unit: str | None) -> str | None:
    """Return a comparable unit key, or None when no unit is given."""
    if unit is None:
        return None
    cleaned = unit.strip().lower()
    return cleaned or None


def clean_unit(unit: str | None) -> str | None:
    """Return the unit as entered, trimmed, or None when it is blank."""
    if unit is None:
        return None
    return unit.strip() or None


def normalize_name(name: str) -> str:
    """Return the lookup key used for ingredient and pantry names."""
    return name.strip().lower()


def is_commensurable(left: str | None, right: str | None) -> bool:
    """Return True when quantities in the two units can be added or subtracted.

    A missing unit on either side matches anything.
    """
    left_key = normalize_unit(left)
    right_key = normalize_unit(right)
    if left_key is None or right_key is None:
        return True
    return left_key == right_key


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero, the way the web client displays numbers."""
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_quantity(value: float) -> float:
    """Round a pantry quantity."""
    return round_half_up(value, PANTRY_PLACES)


def round_hundredths(value: float) -> float:
    """Round to two decimals, as used for macros and shopping quantities."""
    return round_half_up(value, HUNDREDTHS)


def round_calories(value: float) -> int:
    """Round calories to a whole number."""
    return int(round_half_up(value, 0))
