"""
Money helpers.

All user-visible money figures are rounded to cents with ROUND_HALF_UP.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Decimal | int | float | str) -> Decimal:
    """Round to 2 decimal places (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal | float | int) -> Decimal:
    """Return percent% of amount, rounded to cents."""
    return round2(to_decimal(amount) * to_decimal(percent) / HUNDRED)


def format_usd(value: Decimal | int | float | str) -> str:
    """Format amount as $1,234.56."""
    return f"${round2(value):,.2f}"


def plain_amount(value: Decimal | int | float | str) -> str:
    """Format amount without trailing zeros (50, 49.5, 1000.25)."""
    normalized = to_decimal(value).normalize()
    return f"{normalized:f}"
