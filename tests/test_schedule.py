from datetime import date
from decimal import Decimal

from cofre.features.wallets.schedule import (
    contribution_end,
    is_contribution_active,
    months_remaining,
    progress_percentage,
    suggested_periodic_amount,
)
from tests.factories import wallet


def test_months_remaining_from_end_date():
    assert months_remaining(date(2024, 1, 10), date(2024, 1, 1), end_date=date(2024, 7, 1)) == 6


def test_months_remaining_from_periods():
    # Schedule ends at start + 12 months
    assert months_remaining(date(2024, 4, 1), date(2024, 1, 1), periods_total=12) == 9


def test_months_remaining_never_negative():
    assert months_remaining(date(2030, 1, 1), date(2024, 1, 1), end_date=date(2024, 2, 1)) == 0
    assert months_remaining(date(2030, 1, 1), date(2024, 1, 1), periods_total=3) == 0


def test_months_remaining_without_bound():
    assert months_remaining(date(2024, 1, 1), date(2024, 1, 1)) == 0


def test_suggested_amount_with_no_periods_is_whole_gap():
    assert suggested_periodic_amount(1000, 250, 0) == Decimal("750")
    assert suggested_periodic_amount(1000, 1500, 0) == 0


def test_suggested_amount_is_non_increasing():
    amounts = [suggested_periodic_amount(1200, 200, n) for n in range(0, 25)]
    assert all(a >= b for a, b in zip(amounts, amounts[1:]))
    assert amounts[10] == Decimal("100")


def test_suggested_amount_never_negative():
    assert suggested_periodic_amount(100, 500, 4) == 0


def test_contribution_end_prefers_end_date():
    assert contribution_end(date(2024, 1, 31), None, 1) == date(2024, 2, 29)
    assert contribution_end(date(2024, 1, 1), date(2024, 3, 1), None) == date(2024, 3, 1)
    assert contribution_end(date(2024, 1, 1)) is None


def test_progress_is_capped():
    assert progress_percentage(500, 1000) == 50
    assert progress_percentage(2000, 1000) == 100
    assert progress_percentage(10, 0) == 0


def test_contribution_inactive_when_skipped_or_completed():
    w = wallet(monthly=100, skipped={(3, 2024)})
    assert is_contribution_active(w, 2, 2024)
    assert not is_contribution_active(w, 3, 2024)

    done = wallet(monthly=100, target=500, current=500)
    assert not is_contribution_active(done, 2, 2024)


def test_contribution_window_from_periods():
    w = wallet(monthly=100, start=date(2024, 1, 15), periods=2)
    assert is_contribution_active(w, 3, 2024)
    assert not is_contribution_active(w, 4, 2024)
    assert not is_contribution_active(w, 12, 2023)


def test_contribution_without_schedule_never_active():
    assert not is_contribution_active(wallet(monthly=None), 2, 2024)
    assert not is_contribution_active(wallet(monthly=0), 2, 2024)
