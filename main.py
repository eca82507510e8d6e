import logging
from functools import lru_cache
from typing import Awaitable, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from cache import ReportCache
from config import get_settings
from database import get_db
from gate import AuthorizationGate
from ledger import TransactionLedgerStore
from periods import resolve_range
from schemas import (
    BalanceSummaryOut,
    CashFlowOut,
    ErrorOut,
    ExpensesByCategoryOut,
    ProfitMarginOut,
    RevenueByCategoryOut,
    TotalExpensesOut,
    TotalProfitOut,
    TotalRevenueOut,
)
from services import ReportService, parse_type_filter
from sessions import Principal, PrincipalResolver


logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


def _load_app_version() -> str:
    try:
        import tomllib
    except Exception:
        return "unknown"
    try:
        with open("pyproject.toml", "rb") as f:
            data = tomllib.load(f)
        return str(data.get("project", {}).get("version", "unknown"))
    except Exception:
        return "unknown"


APP_VERSION = _load_app_version()

app = FastAPI(title="Ledger Reports", version=APP_VERSION)


def get_ledger_store(db: Session = Depends(get_db)) -> TransactionLedgerStore:
    return TransactionLedgerStore(db)


def get_principal_resolver() -> PrincipalResolver:
    return PrincipalResolver(get_settings())


def get_gate(
    resolver: PrincipalResolver = Depends(get_principal_resolver),
) -> AuthorizationGate:
    return AuthorizationGate(resolver)


@lru_cache(maxsize=1)
def get_report_cache() -> ReportCache:
    settings = get_settings()
    return ReportCache(
        settings.report_cache_ttl_secs, max_entries=settings.report_cache_max_entries
    )


ReportBuilder = Callable[[ReportService], Awaitable[BaseModel]]


class ReportRunner:
    def __init__(
        self,
        gate: AuthorizationGate,
        store: TransactionLedgerStore,
        cache: ReportCache,
    ) -> None:
        self.gate = gate
        self.store = store
        self.cache = cache

    async def __call__(
        self, request: Request, report: str, build: ReportBuilder
    ) -> JSONResponse:
        async def handler(principal: Principal) -> BaseModel:
            date_range = resolve_range(
                request.query_params.get("fromDate"),
                request.query_params.get("toDate"),
            )
            service = ReportService(self.store, principal, date_range, self.cache)
            return await build(service)

        return await self.gate.run(request, handler, report=report)


def get_report_runner(
    gate: AuthorizationGate = Depends(get_gate),
    store: TransactionLedgerStore = Depends(get_ledger_store),
    cache: ReportCache = Depends(get_report_cache),
) -> ReportRunner:
    return ReportRunner(gate, store, cache)


def _responses(model: type[BaseModel]) -> dict[int, dict[str, object]]:
    return {
        200: {"model": model},
        400: {"model": ErrorOut},
        401: {"model": ErrorOut},
        500: {"model": ErrorOut},
    }


@app.get("/reports/cashflow", responses=_responses(CashFlowOut))
async def cashflow_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "cashflow", lambda s: s.cash_flow())


@app.get("/reports/profit/total", responses=_responses(TotalProfitOut))
async def total_profit_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "profit_total", lambda s: s.total_profit())


@app.get("/reports/profit/margin", responses=_responses(ProfitMarginOut))
async def profit_margin_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "profit_margin", lambda s: s.profit_margin())


@app.get("/reports/revenue/category", responses=_responses(RevenueByCategoryOut))
async def revenue_by_category_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "revenue_category", lambda s: s.revenue_by_category())


@app.get("/reports/revenue/total", responses=_responses(TotalRevenueOut))
async def total_revenue_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "revenue_total", lambda s: s.total_revenue())


@app.get("/reports/expenses/category", responses=_responses(ExpensesByCategoryOut))
async def expenses_by_category_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(
        request, "expenses_category", lambda s: s.expenses_by_category()
    )


@app.get("/reports/expenses/total", responses=_responses(TotalExpensesOut))
async def total_expenses_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    return await run(request, "expenses_total", lambda s: s.total_expenses())


@app.get("/reports/balance", responses=_responses(BalanceSummaryOut))
async def balance_report(
    request: Request, run: ReportRunner = Depends(get_report_runner)
):
    async def build(service: ReportService) -> BalanceSummaryOut:
        txn_type = parse_type_filter(request.query_params.get("type"))
        return await service.balance_summary(txn_type)

    return await run(request, "balance", build)


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
