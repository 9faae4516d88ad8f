"""Contribution schedule arithmetic for wallets."""
from datetime import date
from decimal import Decimal
from typing import Optional

from cofre.features.ledger.schemas import RecurringContributionSnapshot
from cofre.utils.finance_utils import (
    ZERO,
    add_months,
    is_active,
    month_range,
    months_between,
    round_half_up,
    to_decimal,
)


def contribution_end(
    start_date: date,
    end_date: Optional[date] = None,
    periods_total: Optional[int] = None
) -> Optional[date]:
    """Last day a wallet's schedule covers, ``None`` when open-ended."""
    if end_date is not None:
        return end_date
    if periods_total:
        return add_months(start_date, periods_total)
    return None


def months_remaining(
    today: date,
    start_date: date,
    end_date: Optional[date] = None,
    periods_total: Optional[int] = None
) -> int:
    end = contribution_end(start_date, end_date, periods_total)
    if end is None:
        return 0
    return months_between(today, end)


def suggested_periodic_amount(target, current, periods_remaining: int) -> Decimal:
    """Even split of what is still owed; the whole gap once no periods are left."""
    missing = to_decimal(target) - to_decimal(current)
    if periods_remaining <= 0:
        return max(missing, ZERO)
    return max(missing / periods_remaining, ZERO)


def progress_percentage(current, target) -> int:
    target = to_decimal(target)
    if target <= 0:
        return 0
    return min(round_half_up(to_decimal(current) / target * 100), 100)


def is_contribution_active(
    contribution: RecurringContributionSnapshot,
    month: int,
    year: int
) -> bool:
    """Whether a wallet draws its monthly contribution in the given month.

    The wallet needs a positive contribution, an activation window covering
    the month, no skip exception for it, and a balance still below target.
    """
    amount = to_decimal(contribution.monthly_contribution)
    if amount <= 0:
        return False
    if to_decimal(contribution.current_amount) >= to_decimal(contribution.target_amount):
        return False

    bounds = month_range(month, year)
    end = contribution_end(contribution.start_date, contribution.end_date, contribution.periods_total)
    if not is_active(contribution.start_date, end, bounds["month_start"], bounds["month_end"]):
        return False
    return not contribution.is_skipped(month, year)
