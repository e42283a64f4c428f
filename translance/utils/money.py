"""Money and rating arithmetic."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


def to_decimal(value: Any) -> Decimal:
    """
    Convert an amount to a two-place Decimal.
    Accepts Decimal, int, float, str. Raises ValueError when invalid.
    """
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            # str() avoids binary float artefacts
            d = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ValueError(f"Invalid money amount: {value!r}") from e

    return d.quantize(CENT)


def mean_rating(ratings: Iterable[int]) -> Decimal:
    """Arithmetic mean rounded half-up to one decimal; 0.0 when there are none."""

    values = [Decimal(r) for r in ratings]
    if not values:
        return Decimal("0.0")
    return (sum(values) / Decimal(len(values))).quantize(TENTH, rounding=ROUND_HALF_UP)


__all__ = ["to_decimal", "mean_rating"]
