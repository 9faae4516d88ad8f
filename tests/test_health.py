from decimal import Decimal

import pytest

from cofre.features.analytics.health import evaluate


@pytest.mark.parametrize(
    "income,expense,status",
    [
        (1000, 500, "excellent"),
        (1000, 800, "good"),
        (1000, 1000, "warning"),
        (1000, 1001, "critical"),
    ],
)
def test_thresholds(income, expense, status):
    assert evaluate(income, expense).status == status


def test_expenses_without_income_are_critical():
    result = evaluate(0, 10)
    assert result.status == "critical"
    assert result.percentage == Decimal("100")


def test_nothing_recorded_is_excellent():
    result = evaluate(0, 0)
    assert result.status == "excellent"
    assert result.percentage == 0
