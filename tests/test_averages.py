from datetime import date
from decimal import Decimal

from cofre.features.analytics.averages import trailing_variable_average, trailing_window
from tests.factories import variable


def test_window_excludes_anchor_month():
    start, end = trailing_window(6, 2024, 3)
    assert start == date(2024, 3, 1)
    assert end == date(2024, 6, 1)


def test_empty_months_count_toward_the_mean():
    entries = [
        variable(300, date(2024, 3, 5)),
        variable(600, date(2024, 5, 20)),
        # anchor month is ignored
        variable(9000, date(2024, 6, 1)),
    ]
    assert trailing_variable_average(entries, 6, 2024, 3) == Decimal("300")


def test_window_crossing_year_boundary():
    entries = [variable(120, date(2023, 12, 31)), variable(60, date(2023, 11, 1))]
    assert trailing_variable_average(entries, 1, 2024, 2) == Decimal("90")


def test_no_history_averages_to_zero():
    assert trailing_variable_average([], 6, 2024, 3) == 0
    assert trailing_variable_average([variable(10, date(2024, 5, 1))], 6, 2024, 0) == 0
