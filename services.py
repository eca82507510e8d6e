from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool

import aggregation
from cache import ReportCache
from exceptions import ReportQueryError
from ledger import LedgerEntry, LedgerQuery, TransactionLedgerStore
from models import TransactionType
from periods import DateRange
from schemas import (
    BalanceSummaryOut,
    CashFlowOut,
    ExpensesByCategoryOut,
    MarginPointOut,
    ProfitMarginOut,
    RevenueByCategoryOut,
    TotalExpensesOut,
    TotalProfitOut,
    TotalRevenueOut,
)
from sessions import Principal


def to_number(amount: Decimal) -> float:
    return float(amount)


def to_number_map(totals: dict[str, Decimal]) -> dict[str, float]:
    return {key: to_number(value) for key, value in totals.items()}


def parse_type_filter(value: Optional[str]) -> Optional[TransactionType]:
    if value is None or value in ("", "all"):
        return None
    try:
        return TransactionType(value)
    except ValueError as exc:
        raise ReportQueryError(f"Unknown transaction type: {value}") from exc


class ReportService:
    """One report, one store query.

    The owner always comes from the principal. The query runs on the
    threadpool so the request only suspends while the store is working.
    """

    def __init__(
        self,
        store: TransactionLedgerStore,
        principal: Principal,
        date_range: Optional[DateRange] = None,
        cache: Optional[ReportCache] = None,
    ) -> None:
        self.store = store
        self.principal = principal
        self.date_range = date_range
        self.cache = cache

    def _query(self, txn_type: Optional[TransactionType] = None) -> LedgerQuery:
        return LedgerQuery(
            owner_id=self.principal.user_id,
            type=txn_type,
            start=self.date_range.start if self.date_range else None,
            end=self.date_range.end if self.date_range else None,
        )

    async def _fetch(self, query: LedgerQuery) -> list[LedgerEntry]:
        return await run_in_threadpool(self.store.query, query)

    async def _report(
        self,
        name: str,
        query: LedgerQuery,
        build: Callable[[list[LedgerEntry]], object],
    ):
        range_key = self.date_range.cache_key() if self.date_range else "all"
        type_key = query.type.value if query.type else "any"
        key = (self.principal.user_id, name, range_key, type_key)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        payload = build(await self._fetch(query))

        if self.cache is not None:
            self.cache.put(key, payload)
        return payload

    async def cash_flow(self) -> CashFlowOut:
        return await self._report(
            "cashflow",
            self._query(),
            lambda entries: CashFlowOut(
                cash_flow=to_number_map(aggregation.cash_flow_by_day(entries))
            ),
        )

    async def total_profit(self) -> TotalProfitOut:
        # selling revenue and expenses come from the same fetch
        return await self._report(
            "profit_total",
            self._query(),
            lambda entries: TotalProfitOut(
                total_profit=to_number(aggregation.total_profit(entries))
            ),
        )

    async def profit_margin(self) -> ProfitMarginOut:
        def build(entries: list[LedgerEntry]) -> ProfitMarginOut:
            points = aggregation.profit_margin_series(entries)
            return ProfitMarginOut(
                profit_margin=[
                    MarginPointOut(date=point.date, margin=to_number(point.margin))
                    for point in points
                ]
            )

        return await self._report("profit_margin", self._query(), build)

    async def revenue_by_category(self) -> RevenueByCategoryOut:
        return await self._report(
            "revenue_category",
            self._query(TransactionType.income),
            lambda entries: RevenueByCategoryOut(
                revenue_by_category=to_number_map(
                    aggregation.revenue_by_category(entries)
                )
            ),
        )

    async def total_revenue(self) -> TotalRevenueOut:
        return await self._report(
            "revenue_total",
            self._query(TransactionType.income),
            lambda entries: TotalRevenueOut(
                total_revenue=to_number(aggregation.total_revenue(entries))
            ),
        )

    async def expenses_by_category(self) -> ExpensesByCategoryOut:
        return await self._report(
            "expenses_category",
            self._query(TransactionType.expense),
            lambda entries: ExpensesByCategoryOut(
                expenses_by_category=to_number_map(
                    aggregation.expenses_by_category(entries)
                )
            ),
        )

    async def total_expenses(self) -> TotalExpensesOut:
        return await self._report(
            "expenses_total",
            self._query(TransactionType.expense),
            lambda entries: TotalExpensesOut(
                total_expenses=to_number(aggregation.total_expenses(entries))
            ),
        )

    async def balance_summary(
        self, txn_type: Optional[TransactionType] = None
    ) -> BalanceSummaryOut:
        return await self._report(
            "balance",
            self._query(txn_type),
            lambda entries: BalanceSummaryOut(
                summary=to_number_map(aggregation.totals_by_type(entries))
            ),
        )
