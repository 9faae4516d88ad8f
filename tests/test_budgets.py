from decimal import Decimal

import pytest

from cofre.features.budgets.schemas import BudgetUpsert
from cofre.features.budgets.service import BudgetService, budget_status, budget_usage
from cofre.features.ledger.store import LedgerStore
from tests.factories import ACCOUNT

pytestmark = pytest.mark.anyio


@pytest.mark.parametrize(
    "percentage,expected",
    [(Decimal("0"), "green"), (Decimal("79.99"), "green"), (Decimal("80"), "warning"),
     (Decimal("100"), "warning"), (Decimal("100.01"), "danger")],
)
def test_budget_status_bands(percentage, expected):
    assert budget_status(percentage) == expected


def test_usage_without_budget():
    assert budget_usage(Decimal("10"), Decimal("0")) == 100
    assert budget_usage(Decimal("0"), Decimal("0")) == 0
    assert budget_usage(Decimal("45"), Decimal("60")) == 75


async def test_upsert_replaces_amount_for_same_period(db_session):
    service = BudgetService()
    first = await service.upsert_budget(
        db_session, ACCOUNT, BudgetUpsert(category_id="food", month=6, year=2024, amount=Decimal("300"))
    )
    second = await service.upsert_budget(
        db_session, ACCOUNT, BudgetUpsert(category_id="food", month=6, year=2024, amount=Decimal("450"))
    )

    assert second.id == first.id
    assert second.amount == Decimal("450")

    budgets = await LedgerStore(db_session).list_category_budgets(ACCOUNT, 6, 2024)
    assert len(budgets) == 1
    assert budgets[0].amount == Decimal("450")


async def test_budgets_are_per_month(db_session):
    service = BudgetService()
    await service.upsert_budget(
        db_session, ACCOUNT, BudgetUpsert(category_id="food", month=6, year=2024, amount=Decimal("300"))
    )
    await service.upsert_budget(
        db_session, ACCOUNT, BudgetUpsert(category_id="food", month=7, year=2024, amount=Decimal("100"))
    )

    assert len(await service.list_budgets(db_session, ACCOUNT, 6, 2024)) == 1
    assert len(await service.list_budgets(db_session, ACCOUNT, 7, 2024)) == 1
