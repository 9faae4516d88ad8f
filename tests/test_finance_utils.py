from datetime import date
from decimal import Decimal

import pytest

from cofre.utils.finance_utils import (
    add_months,
    calculate_variance_percentage,
    is_active,
    month_range,
    months_between,
    round_half_up,
    shift_month,
)


def test_month_range_handles_leap_february():
    bounds = month_range(2, 2024)
    assert bounds["month_start"] == date(2024, 2, 1)
    assert bounds["month_end"] == date(2024, 2, 29)


@pytest.mark.parametrize(
    "month,year,offset,expected",
    [
        (1, 2024, -1, (12, 2023)),
        (12, 2024, 1, (1, 2025)),
        (6, 2024, -18, (12, 2022)),
        (3, 2024, 0, (3, 2024)),
    ],
)
def test_shift_month_crosses_years(month, year, offset, expected):
    assert shift_month(month, year, offset) == expected


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 3, 15), 12) == date(2025, 3, 15)


def test_months_between_never_negative():
    assert months_between(date(2024, 1, 10), date(2024, 6, 1)) == 5
    assert months_between(date(2024, 6, 1), date(2020, 1, 1)) == 0


def test_open_ended_commitment_stays_active():
    start = date(2024, 3, 15)
    for offset in range(0, 60):
        month, year = shift_month(3, 2024, offset)
        bounds = month_range(month, year)
        assert is_active(start, None, bounds["month_start"], bounds["month_end"])


def test_commitment_not_active_before_start_or_after_end():
    start, end = date(2024, 3, 15), date(2024, 5, 10)
    feb = month_range(2, 2024)
    mar = month_range(3, 2024)
    may = month_range(5, 2024)
    jun = month_range(6, 2024)
    assert not is_active(start, end, feb["month_start"], feb["month_end"])
    assert is_active(start, end, mar["month_start"], mar["month_end"])
    assert is_active(start, end, may["month_start"], may["month_end"])
    assert not is_active(start, end, jun["month_start"], jun["month_end"])


def test_variance_percentage_without_baseline():
    assert calculate_variance_percentage(Decimal("80"), Decimal("0")) == 100
    assert calculate_variance_percentage(Decimal("0"), Decimal("0")) == 0
    assert calculate_variance_percentage(Decimal("150"), Decimal("100")) == 50


def test_round_half_up():
    assert round_half_up(Decimal("0.5")) == 1
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.49")) == 2
