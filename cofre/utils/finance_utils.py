"""Calendar and money helpers shared by the aggregation engine and services."""
from calendar import monthrange
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional, Tuple

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and None into a Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value) -> int:
    """Integer rounding that sends .5 away from zero."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def total_amount(rows: Iterable, attr: str = "amount") -> Decimal:
    return sum((to_decimal(getattr(row, attr)) for row in rows), ZERO)


def shift_month(month: int, year: int, offset: int) -> Tuple[int, int]:
    """Move a (month, year) key by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index % 12 + 1, index // 12


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month, year = shift_month(start.month, start.year, months)
    day = min(start.day, monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, never negative."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, months)


def month_range(month: int, year: int) -> Dict[str, date]:
    """First and last day of a month."""
    return {
        "month_start": date(year, month, 1),
        "month_end": date(year, month, monthrange(year, month)[1]),
    }


def is_active(
    start: date,
    end: Optional[date],
    month_start: date,
    month_end: date
) -> bool:
    """Whether a ``[start, end]`` commitment overlaps the month.

    An open-ended commitment (``end is None``) stays active for every month
    from its start onwards.
    """
    return start <= month_end and (end is None or end >= month_start)


def calculate_variance_percentage(current: Decimal, previous: Decimal) -> Decimal:
    """Percent change from ``previous`` to ``current``.

    With no baseline, any new spending counts as a 100% increase.
    """
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous > 0:
        return (current - previous) / previous * 100
    return Decimal("100") if current > 0 else ZERO
