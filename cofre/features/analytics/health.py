from decimal import Decimal
from typing import NamedTuple

from cofre.utils.finance_utils import ZERO, to_decimal


class HealthResult(NamedTuple):
    status: str
    percentage: Decimal


def evaluate(income, expense) -> HealthResult:
    """Classify the share of income consumed by expenses."""
    income = to_decimal(income)
    expense = to_decimal(expense)

    if income > 0:
        percentage = expense / income * 100
        if percentage <= 50:
            status = "excellent"
        elif percentage <= 80:
            status = "good"
        elif percentage <= 100:
            status = "warning"
        else:
            status = "critical"
        return HealthResult(status, percentage)

    if expense > 0:
        return HealthResult("critical", Decimal("100"))
    return HealthResult("excellent", ZERO)
