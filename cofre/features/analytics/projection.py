from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from cofre.features.analytics.aggregator import active_contributions, active_fixed_expenses
from cofre.features.analytics.averages import trailing_variable_average
from cofre.features.ledger.schemas import LedgerSnapshot
from cofre.utils.finance_utils import ZERO, shift_month, total_amount


class ProjectionRow(BaseModel):
    month: int
    year: int
    income: Decimal
    fixed_expense: Decimal
    contribution_expense: Decimal
    avg_variable: Decimal
    total_expense: Decimal
    balance: Decimal
    cumulative_balance: Decimal


class ProjectionAssumptions(BaseModel):
    fixed_income_total: Decimal
    avg_variable_months: int
    avg_variable_total: Decimal


class Projection(BaseModel):
    projections: List[ProjectionRow]
    assumptions: ProjectionAssumptions


def project(
    ledger: LedgerSnapshot,
    today: date,
    months_ahead: int,
    window_months: int = 3
) -> Projection:
    """Roll the month forward ``months_ahead`` times from ``today``.

    Income is today's fixed income held constant (extra income is left out).
    Variable spend is the trailing average as of today, also held constant.
    Fixed expenses and wallet contributions follow their own windows and any
    skips already on file for the projected month.
    """
    income = total_amount(ledger.fixed_incomes)
    avg_variable = trailing_variable_average(
        ledger.variable_expenses, today.month, today.year, window_months
    )

    rows: List[ProjectionRow] = []
    cumulative = ZERO
    for i in range(1, months_ahead + 1):
        month, year = shift_month(today.month, today.year, i)
        fixed_expense = total_amount(active_fixed_expenses(ledger.fixed_expenses, month, year))
        contribution_expense = total_amount(
            active_contributions(ledger.contributions, month, year), attr="monthly_contribution"
        )
        total_expense = fixed_expense + contribution_expense + avg_variable
        balance = income - total_expense
        cumulative += balance
        rows.append(ProjectionRow(
            month=month,
            year=year,
            income=income,
            fixed_expense=fixed_expense,
            contribution_expense=contribution_expense,
            avg_variable=avg_variable,
            total_expense=total_expense,
            balance=balance,
            cumulative_balance=cumulative,
        ))

    return Projection(
        projections=rows,
        assumptions=ProjectionAssumptions(
            fixed_income_total=income,
            avg_variable_months=window_months,
            avg_variable_total=avg_variable,
        ),
    )
