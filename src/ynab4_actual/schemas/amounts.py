"""
Amount and month conversion (SSOT).

YNAB4 stores amounts as JSON numbers in major currency units. Actual stores
integers in minor units (cents). Conversion goes through Decimal so that
binary float artifacts (e.g. 10.005 stored as 10.00499...) never leak into
the rounding step.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

MINOR_UNITS = Decimal(100)


def amount_to_integer(amount: Decimal | float | int | str | None) -> int:
    """Convert a major-unit amount to integer minor units.

    Args:
        amount: Amount as stored in the snapshot (None counts as zero)

    Returns:
        Amount in cents, rounded half away from zero

    Examples:
        >>> amount_to_integer(12.34)
        1234
        >>> amount_to_integer("-0.005")
        -1
    """
    if amount is None:
        return 0
    if isinstance(amount, float):
        amount = Decimal(str(amount))
    elif not isinstance(amount, Decimal):
        amount = Decimal(str(amount).strip())

    return int((amount * MINOR_UNITS).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def month_from_date(value: str) -> str:
    """Return the "YYYY-MM" month of an ISO date string."""
    return date.fromisoformat(value[:10]).strftime("%Y-%m")
