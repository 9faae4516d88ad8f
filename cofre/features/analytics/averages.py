from decimal import Decimal
from typing import Iterable

from cofre.features.ledger.schemas import AdHocEntrySnapshot
from cofre.utils.finance_utils import ZERO, month_range, shift_month, to_decimal


def trailing_window(anchor_month: int, anchor_year: int, window_months: int = 3):
    """``[first day of anchor - N months, first day of anchor)`` as (start, end_exclusive)."""
    start_month, start_year = shift_month(anchor_month, anchor_year, -window_months)
    start = month_range(start_month, start_year)["month_start"]
    end = month_range(anchor_month, anchor_year)["month_start"]
    return start, end


def trailing_variable_average(
    entries: Iterable[AdHocEntrySnapshot],
    anchor_month: int,
    anchor_year: int,
    window_months: int = 3
) -> Decimal:
    """Mean monthly variable spend over the N months before the anchor.

    Always divides by ``window_months``: months with no entries pull the
    average down instead of being left out.
    """
    if window_months <= 0:
        return ZERO
    start, end = trailing_window(anchor_month, anchor_year, window_months)
    total = sum(
        (to_decimal(e.amount) for e in entries
         if e.entry_date is not None and start <= e.entry_date < end),
        ZERO,
    )
    return total / window_months
