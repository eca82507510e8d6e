from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import StoreFailure
from models import Transaction, TransactionStatus, TransactionType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    owner_id: str
    amount: object
    type: TransactionType
    category: Optional[str]
    status: TransactionStatus
    created_at: Optional[datetime]


@dataclass(frozen=True)
class LedgerQuery:
    owner_id: str
    status: TransactionStatus = TransactionStatus.completed
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if not self.owner_id:
            raise ValueError("Ledger queries must be scoped to an owner")


class TransactionLedgerStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def query(self, query: LedgerQuery) -> list[LedgerEntry]:
        """Fetch owner-scoped entries in the given status, oldest first.

        Ties on created_at are broken by id so the fold order is stable.
        Rows with no created_at sort first and never match a date range.
        """
        stmt = select(
            Transaction.id,
            Transaction.user_uid,
            Transaction.amount,
            Transaction.type,
            Transaction.category,
            Transaction.status,
            Transaction.created_at,
        ).where(
            Transaction.user_uid == query.owner_id,
            Transaction.status == query.status,
        )
        if query.type is not None:
            stmt = stmt.where(Transaction.type == query.type)
        if query.category is not None:
            stmt = stmt.where(Transaction.category == query.category)
        if query.start is not None:
            stmt = stmt.where(
                Transaction.created_at >= datetime.combine(query.start, time.min)
            )
        if query.end is not None:
            stmt = stmt.where(
                Transaction.created_at
                < datetime.combine(query.end + timedelta(days=1), time.min)
            )
        stmt = stmt.order_by(Transaction.created_at.asc(), Transaction.id.asc())

        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            logger.error(
                f"ledger_query_failed: owner={query.owner_id} error={exc.__class__.__name__}"
            )
            raise StoreFailure("Failed to fetch transactions") from exc

        return [
            LedgerEntry(
                id=row.id,
                owner_id=row.user_uid,
                amount=row.amount,
                type=row.type,
                category=row.category,
                status=row.status,
                created_at=row.created_at,
            )
            for row in rows
        ]
