import asyncio
from datetime import date, datetime
from decimal import Decimal

import pytest

from cache import ReportCache
from exceptions import ReportQueryError
from ledger import LedgerEntry, LedgerQuery
from models import TransactionStatus, TransactionType
from periods import DateRange, resolve_range
from services import ReportService, parse_type_filter
from sessions import Principal


class RecordingStore:
    def __init__(self, entries: list[LedgerEntry]) -> None:
        self.entries = entries
        self.queries: list[LedgerQuery] = []

    def query(self, query: LedgerQuery) -> list[LedgerEntry]:
        self.queries.append(query)
        return [e for e in self.entries if query.type is None or e.type == query.type]


def entry(id: int, amount: str, type: TransactionType, category=None) -> LedgerEntry:
    return LedgerEntry(
        id=id,
        owner_id="alice",
        amount=Decimal(amount),
        type=type,
        category=category,
        status=TransactionStatus.completed,
        created_at=datetime(2025, 3, 1, 12, 0),
    )


ENTRIES = [
    entry(1, "100", TransactionType.income, "selling"),
    entry(2, "30", TransactionType.expense, "rent"),
]


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_total_profit_uses_one_shared_query() -> None:
    store = RecordingStore(ENTRIES)

    result = asyncio.run(ReportService(store, Principal("alice")).total_profit())

    assert result.total_profit == 70
    assert store.queries == [LedgerQuery(owner_id="alice")]


def test_queries_carry_principal_status_and_range() -> None:
    store = RecordingStore(ENTRIES)
    service = ReportService(
        store,
        Principal("alice"),
        DateRange(date(2025, 3, 1), date(2025, 3, 31)),
    )

    asyncio.run(service.revenue_by_category())

    assert store.queries == [
        LedgerQuery(
            owner_id="alice",
            status=TransactionStatus.completed,
            type=TransactionType.income,
            start=date(2025, 3, 1),
            end=date(2025, 3, 31),
        )
    ]


def test_cache_serves_repeat_reports_until_ttl_expires() -> None:
    clock = FakeClock()
    cache = ReportCache(30, clock=clock)
    store = RecordingStore(ENTRIES)
    service = ReportService(store, Principal("alice"), cache=cache)

    first = asyncio.run(service.total_revenue())
    second = asyncio.run(service.total_revenue())
    clock.now += 31
    third = asyncio.run(service.total_revenue())

    assert first.total_revenue == second.total_revenue == third.total_revenue == 100
    assert len(store.queries) == 2


def test_cache_keys_are_per_owner() -> None:
    cache = ReportCache(30, clock=FakeClock())
    store = RecordingStore(ENTRIES)

    asyncio.run(ReportService(store, Principal("alice"), cache=cache).cash_flow())
    asyncio.run(ReportService(store, Principal("bob"), cache=cache).cash_flow())

    assert [q.owner_id for q in store.queries] == ["alice", "bob"]


def test_disabled_cache_stores_nothing() -> None:
    cache = ReportCache(0)
    cache.put(("alice", "cashflow"), "payload")

    assert not cache.enabled
    assert cache.get(("alice", "cashflow")) is None


def test_cache_sweeps_expired_entries_and_stays_bounded() -> None:
    clock = FakeClock()
    cache = ReportCache(30, max_entries=100, clock=clock)

    for i in range(10_000):
        cache.put((f"user-{i}", "cashflow"), i)

    assert len(cache) == 100
    assert cache.get(("user-0", "cashflow")) is None
    assert cache.get(("user-9999", "cashflow")) == 9999

    clock.now += 3600
    cache.put(("alice", "cashflow"), "payload")

    assert len(cache) == 1
    assert cache.get(("alice", "cashflow")) == "payload"


def test_cache_refreshing_a_key_protects_it_from_eviction() -> None:
    cache = ReportCache(30, max_entries=2, clock=FakeClock())
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 3)
    cache.put("c", 4)

    assert cache.get("a") == 3
    assert cache.get("b") is None
    assert cache.get("c") == 4


def test_cache_clear() -> None:
    cache = ReportCache(30, clock=FakeClock())
    cache.put(("alice", "cashflow"), "payload")

    cache.clear()

    assert cache.get(("alice", "cashflow")) is None


def test_resolve_range() -> None:
    assert resolve_range(None, None) is None
    assert resolve_range("", " ") is None
    assert resolve_range("2025-03-01", None) == DateRange(date(2025, 3, 1), None)
    assert resolve_range("2025-03-01", "2025-03-01") == DateRange(
        date(2025, 3, 1), date(2025, 3, 1)
    )


def test_resolve_range_rejects_bad_input() -> None:
    with pytest.raises(ReportQueryError):
        resolve_range("2025-13-01", None)
    with pytest.raises(ReportQueryError):
        resolve_range("2025-03-02", "2025-03-01")


def test_parse_type_filter() -> None:
    assert parse_type_filter(None) is None
    assert parse_type_filter("all") is None
    assert parse_type_filter("income") == TransactionType.income
    with pytest.raises(ReportQueryError):
        parse_type_filter("refund")
