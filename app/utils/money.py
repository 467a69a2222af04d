"""
Money helpers.

All balance arithmetic happens in integer cents. Amounts enter and leave
the engine as 2-place decimals (floats), and are converted exactly once
on the way in and once on the way out.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR, InvalidOperation

# A balance must be strictly more than one cent away from zero to count.
SETTLED_THRESHOLD = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    """Exact decimal form of an amount as written, e.g. 0.1 -> Decimal("0.1")."""
    return Decimal(str(amount))


def to_cents(amount: float) -> int:
    """Convert a decimal amount to integer cents, rounding half up."""
    cents = to_decimal(amount) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> float:
    return cents / 100


def divide_cents(total_cents: int, parts: int) -> int:
    """
    Per-part share of total_cents, rounded to the nearest cent.

    Ties round toward positive infinity, so 1 cent over 2 parts is 1 and
    -1 cent over 2 parts is 0.
    """
    share = Decimal(total_cents) / Decimal(parts)
    return int((share + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def is_valid_amount(amount) -> bool:
    """True for a finite, positive real number (bools excluded)."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return False
    try:
        return math.isfinite(amount) and amount > 0
    except (TypeError, ValueError, InvalidOperation):
        return False


def sanitize_amount(amount: float) -> float:
    """Round to 2 places; NaN and infinities collapse to 0. Negatives are kept."""
    if not math.isfinite(amount):
        return 0.0
    return from_cents(to_cents(amount))


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
