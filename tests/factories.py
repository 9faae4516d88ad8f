import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from cofre.features.ledger.models import EntryKind
from cofre.features.ledger.schemas import (
    AdHocEntrySnapshot,
    AssetSnapshot,
    CategoryBudgetSnapshot,
    FixedCommitmentSnapshot,
    LedgerSnapshot,
    RecurringContributionSnapshot,
)

ACCOUNT = "acc-1"


def fixed(amount, start=date(2024, 1, 1), end=None, kind=EntryKind.EXPENSE, category=None, due_day=None):
    return FixedCommitmentSnapshot(
        id=uuid.uuid4(),
        account_id=ACCOUNT,
        kind=kind,
        amount=Decimal(str(amount)),
        start_date=start,
        end_date=end,
        category_id=category,
        due_day=due_day,
    )


def fixed_income(amount, start=date(2024, 1, 1)):
    return fixed(amount, start=start, kind=EntryKind.INCOME)


def variable(amount, on: date, category: Optional[str] = None):
    return AdHocEntrySnapshot(
        id=uuid.uuid4(),
        account_id=ACCOUNT,
        kind=EntryKind.EXPENSE,
        amount=Decimal(str(amount)),
        entry_date=on,
        month=on.month,
        year=on.year,
        category_id=category,
    )


def extra_income(amount, month: int, year: int):
    return AdHocEntrySnapshot(
        id=uuid.uuid4(),
        account_id=ACCOUNT,
        kind=EntryKind.INCOME,
        amount=Decimal(str(amount)),
        month=month,
        year=year,
    )


def wallet(
    monthly=None,
    target=1000,
    current=0,
    start=date(2024, 1, 1),
    end=None,
    periods=None,
    skipped=(),
    linked_asset_id=None
):
    return RecurringContributionSnapshot(
        id=uuid.uuid4(),
        account_id=ACCOUNT,
        name="Trip",
        target_amount=Decimal(str(target)),
        current_amount=Decimal(str(current)),
        start_date=start,
        end_date=end,
        periods_total=periods,
        monthly_contribution=Decimal(str(monthly)) if monthly is not None else None,
        skipped=frozenset(skipped),
        linked_asset_id=linked_asset_id,
    )


def budget(category: str, amount, month=6, year=2024):
    return CategoryBudgetSnapshot(
        category_id=category,
        account_id=ACCOUNT,
        month=month,
        year=year,
        amount=Decimal(str(amount)),
    )


def asset(category="ACOES", status="QUITADO", value=1000, wallet_id=None):
    return AssetSnapshot(
        id=uuid.uuid4(),
        account_id=ACCOUNT,
        category=category,
        status=status,
        estimated_value=Decimal(str(value)),
        wallet_id=wallet_id,
    )


def ledger(**collections):
    return LedgerSnapshot(account_id=ACCOUNT, **collections)
