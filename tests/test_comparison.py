from datetime import date
from decimal import Decimal

from cofre.features.analytics.aggregator import compute_month
from cofre.features.analytics.comparison import compare
from tests.factories import ledger, variable


def _compare(entries):
    snapshot = ledger(variable_expenses=entries)
    return compare(compute_month(snapshot, 5, 2024), compute_month(snapshot, 6, 2024))


def test_existing_category_change():
    result = _compare([
        variable(100, date(2024, 5, 2), category="Food"),
        variable(150, date(2024, 6, 2), category="Food"),
    ])
    food = result.changes[0]
    assert food.category_id == "Food"
    assert food.change == Decimal("50")
    assert food.change_percent == Decimal("50")
    assert result.biggest_increase == food
    assert result.biggest_saving is None


def test_new_category_is_full_increase():
    result = _compare([variable(80, date(2024, 6, 2), category="Pets")])
    pets = result.changes[0]
    assert (pets.month1_value, pets.month2_value) == (0, Decimal("80"))
    assert pets.change == Decimal("80")
    assert pets.change_percent == Decimal("100")


def test_changes_sorted_by_magnitude():
    result = _compare([
        variable(500, date(2024, 5, 2), category="Rent"),
        variable(10, date(2024, 6, 2), category="Coffee"),
        variable(40, date(2024, 5, 2), category="Books"),
        variable(80, date(2024, 6, 2), category="Books"),
    ])
    assert [c.category_id for c in result.changes] == ["Rent", "Books", "Coffee"]
    assert result.biggest_saving.category_id == "Rent"
    assert result.biggest_saving.change_percent == Decimal("-100")
    assert result.biggest_increase.category_id == "Books"


def test_equal_moves_keep_alphabetical_order():
    result = _compare([
        variable(10, date(2024, 6, 2), category="b"),
        variable(10, date(2024, 6, 2), category="a"),
    ])
    assert [c.category_id for c in result.changes] == ["a", "b"]
