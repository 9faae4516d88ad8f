from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from cofre.features.analytics.aggregator import MonthlyAggregate
from cofre.utils.finance_utils import ZERO, calculate_variance_percentage


class CategoryChange(BaseModel):
    category_id: str
    month1_value: Decimal
    month2_value: Decimal
    change: Decimal
    change_percent: Decimal


class MonthComparison(BaseModel):
    month1: MonthlyAggregate
    month2: MonthlyAggregate
    changes: List[CategoryChange]
    biggest_increase: Optional[CategoryChange] = None
    biggest_saving: Optional[CategoryChange] = None


def compare(first: MonthlyAggregate, second: MonthlyAggregate) -> MonthComparison:
    """Per-category deltas from ``first`` to ``second``, largest moves first."""
    keys = sorted(set(first.by_category) | set(second.by_category))

    changes: List[CategoryChange] = []
    for key in keys:
        before = first.by_category[key].total if key in first.by_category else ZERO
        after = second.by_category[key].total if key in second.by_category else ZERO
        changes.append(CategoryChange(
            category_id=key,
            month1_value=before,
            month2_value=after,
            change=after - before,
            change_percent=calculate_variance_percentage(after, before),
        ))

    # Stable sort keeps key order among equal magnitudes
    changes.sort(key=lambda c: abs(c.change), reverse=True)

    return MonthComparison(
        month1=first,
        month2=second,
        changes=changes,
        biggest_increase=next((c for c in changes if c.change > 0), None),
        biggest_saving=next((c for c in changes if c.change < 0), None),
    )
