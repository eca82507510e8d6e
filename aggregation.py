"""Folds over completed, owner-scoped ledger entries.

Callers pass entries that the store has already filtered, so these functions
never re-check owner or status. Each call builds a fresh accumulator and
leaves its input untouched. Amounts are parsed into Decimal before they are
added. An amount that cannot be parsed raises AggregationInputError rather
than counting as zero.

Day buckets use the UTC calendar date of created_at. Naive timestamps are
treated as UTC, and entries without a timestamp land under "unknown".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from exceptions import AggregationInputError
from ledger import LedgerEntry
from models import SELLING_CATEGORY, TransactionType


ZERO = Decimal("0")
UNKNOWN_DATE = "unknown"
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class MarginPoint:
    date: str
    margin: Decimal


def parse_amount(value: object, *, transaction_id: object = None) -> Decimal:
    if value is None or isinstance(value, bool):
        raise AggregationInputError(
            f"Transaction {transaction_id} has no usable amount",
            transaction_id=transaction_id,
        )
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise AggregationInputError(
                f"Transaction {transaction_id} has a non-numeric amount: {value!r}",
                transaction_id=transaction_id,
            ) from exc
    if not amount.is_finite():
        raise AggregationInputError(
            f"Transaction {transaction_id} has a non-finite amount: {value!r}",
            transaction_id=transaction_id,
        )
    return amount


def bucket_date(created_at: Optional[datetime]) -> str:
    if created_at is None:
        return UNKNOWN_DATE
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc)
    return created_at.date().isoformat()


def _amount(entry: LedgerEntry) -> Decimal:
    return parse_amount(entry.amount, transaction_id=entry.id)


def _sum(entries: Iterable[LedgerEntry]) -> Decimal:
    total = ZERO
    for entry in entries:
        total += _amount(entry)
    return total


def cash_flow_by_day(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in entries:
        key = bucket_date(entry.created_at)
        totals[key] = totals.get(key, ZERO) + _amount(entry)
    return totals


def revenue_by_category(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in entries:
        if entry.type != TransactionType.income:
            continue
        # income without a category is left out of the breakdown entirely
        if not entry.category:
            continue
        totals[entry.category] = totals.get(entry.category, ZERO) + _amount(entry)
    return totals


def expenses_by_category(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in entries:
        if entry.type != TransactionType.expense:
            continue
        key = entry.category or UNCATEGORIZED
        totals[key] = totals.get(key, ZERO) + _amount(entry)
    return totals


def total_revenue(entries: Iterable[LedgerEntry]) -> Decimal:
    return _sum(e for e in entries if e.type == TransactionType.income)


def total_expenses(entries: Iterable[LedgerEntry]) -> Decimal:
    return _sum(e for e in entries if e.type == TransactionType.expense)


def total_profit(entries: Iterable[LedgerEntry]) -> Decimal:
    """Selling-category amounts minus every expense, over one snapshot.

    An expense filed under "selling" counts on both sides.
    """
    snapshot = list(entries)
    selling = _sum(e for e in snapshot if e.category == SELLING_CATEGORY)
    expenses = _sum(e for e in snapshot if e.type == TransactionType.expense)
    return selling - expenses


def profit_margin_series(entries: Iterable[LedgerEntry]) -> list[MarginPoint]:
    days: dict[str, tuple[Decimal, Decimal]] = {}
    for entry in entries:
        key = bucket_date(entry.created_at)
        selling, expense = days.get(key, (ZERO, ZERO))
        if entry.category == SELLING_CATEGORY:
            selling += _amount(entry)
        elif entry.type == TransactionType.expense:
            expense += _amount(entry)
        days[key] = (selling, expense)

    series: list[MarginPoint] = []
    for key, (selling, expense) in days.items():
        if selling > 0:
            margin = ((selling - expense) / selling * 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        else:
            margin = ZERO
        series.append(MarginPoint(date=key, margin=margin))
    return series


def totals_by_type(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in entries:
        key = TransactionType(entry.type).value
        totals[key] = totals.get(key, ZERO) + _amount(entry)
    return totals
