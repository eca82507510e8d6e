from pydantic import BaseModel, ConfigDict, Field


class _ReportOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CashFlowOut(_ReportOut):
    cash_flow: dict[str, float] = Field(..., alias="cashFlow")


class TotalProfitOut(_ReportOut):
    total_profit: float = Field(..., alias="totalProfit")


class RevenueByCategoryOut(_ReportOut):
    revenue_by_category: dict[str, float] = Field(..., alias="revenueByCategory")


class TotalRevenueOut(_ReportOut):
    total_revenue: float = Field(..., alias="totalRevenue")


class ExpensesByCategoryOut(_ReportOut):
    expenses_by_category: dict[str, float] = Field(..., alias="expensesByCategory")


class TotalExpensesOut(_ReportOut):
    total_expenses: float = Field(..., alias="totalExpenses")


class MarginPointOut(_ReportOut):
    date: str
    margin: float


class ProfitMarginOut(_ReportOut):
    profit_margin: list[MarginPointOut] = Field(..., alias="profitMargin")


class BalanceSummaryOut(_ReportOut):
    summary: dict[str, float]


class ErrorOut(BaseModel):
    error: str = Field(..., min_length=1)
    code: str
