from typing import Dict, List, Optional

from cofre.core.schemas import CamelModel


class IncomeBreakdown(CamelModel):
    fixed: float
    extra: float
    total: float


class TotalOnly(CamelModel):
    total: float


class ExpenseBreakdown(CamelModel):
    fixed: TotalOnly
    variable: TotalOnly
    piggy_banks: TotalOnly
    total: float


class HealthSchema(CamelModel):
    percentage: float
    status: str


class MonthlySummaryResponse(CamelModel):
    month: int
    year: int
    income: IncomeBreakdown
    expenses: ExpenseBreakdown
    balance: float
    health: HealthSchema


class FinancialHealthResponse(CamelModel):
    month: int
    year: int
    income: float
    expenses: float
    fixed_expenses: float
    variable_expenses: float
    balance: float
    health_status: str
    health_percentage: float


class PillarResponse(CamelModel):
    name: str
    score: int
    max: int
    detail: str


class ScoreResponse(CamelModel):
    score: int
    max_score: int = 1000
    level: str
    pillars: List[PillarResponse]


class ProjectionRowResponse(CamelModel):
    month: int
    year: int
    income: float
    fixed_expense: float
    contribution_expense: float
    avg_variable: float
    total_expense: float
    balance: float
    cumulative_balance: float


class ProjectionAssumptionsResponse(CamelModel):
    fixed_income_total: float
    avg_variable_months: int
    avg_variable_total: float


class CashFlowProjectionResponse(CamelModel):
    projections: List[ProjectionRowResponse]
    assumptions: ProjectionAssumptionsResponse


class CategoryTotalResponse(CamelModel):
    total: float
    count: int


class AggregateResponse(CamelModel):
    month: int
    year: int
    fixed_income: float
    extra_income: float
    fixed_expense: float
    variable_expense: float
    contribution_expense: float
    total_income: float
    total_expense: float
    balance: float
    by_category: Dict[str, CategoryTotalResponse]


class CategoryChangeResponse(CamelModel):
    category_id: str
    month1_value: float
    month2_value: float
    change: float
    change_percent: float


class MonthComparisonResponse(CamelModel):
    month1: AggregateResponse
    month2: AggregateResponse
    changes: List[CategoryChangeResponse]
    biggest_increase: Optional[CategoryChangeResponse] = None
    biggest_saving: Optional[CategoryChangeResponse] = None


class MonthlyEvolutionItem(CamelModel):
    month: int
    year: int
    income: float
    expenses: float
    balance: float


class CategoryExpense(CamelModel):
    category_id: str
    total: float
    count: int


class ExpensesByCategoryResponse(CamelModel):
    month: int
    year: int
    categories: List[CategoryExpense]
    total: float
