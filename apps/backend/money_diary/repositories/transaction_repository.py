from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import extract, func
from sqlalchemy.orm import Query, Session, selectinload

from money_diary import models
from money_diary.utils.periods import period_bounds


@dataclass
class TransactionFilters:
    year: int | None = None
    month: int | None = None
    category_id: int | None = None
    search: str | None = None
    page: int | None = None
    limit: int | None = None


class TransactionRepository(Protocol):
    def exists_by_external_id(self, user_id: int, external_id: str) -> bool: ...
    def create(self, data: dict[str, Any]) -> models.Expense: ...
    def find_by_user_id(self, user_id: int, filters: TransactionFilters | None = None) -> list[models.Expense]: ...
    def find_in_period(self, user_id: int, start: datetime, end: datetime) -> list[models.Expense]: ...
    def update_category(self, expense: models.Expense, category_id: int | None) -> models.Expense: ...


class SqlTransactionRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _filtered(self, user_id: int, filters: TransactionFilters | None) -> Query:
        q = self.db.query(models.Expense).filter(models.Expense.user_id == user_id)
        if filters is None:
            return q
        if filters.year is not None:
            start, end = period_bounds(filters.year, filters.month)
            q = q.filter(models.Expense.transaction_date >= start, models.Expense.transaction_date < end)
        if filters.category_id is not None:
            q = q.filter(models.Expense.category_id == filters.category_id)
        if filters.search:
            q = q.filter(models.Expense.merchant.ilike(f"%{filters.search}%"))
        return q

    def exists_by_external_id(self, user_id: int, external_id: str) -> bool:
        return (
            self.db.query(models.Expense.id)
            .filter(
                models.Expense.user_id == user_id,
                models.Expense.external_transaction_id == external_id,
            )
            .first()
            is not None
        )

    def create(self, data: dict[str, Any]) -> models.Expense:
        row = models.Expense(**data)
        self.db.add(row)
        self.db.flush()
        return row

    def find_by_id(self, expense_id: int) -> models.Expense | None:
        return self.db.get(models.Expense, expense_id)

    def find_by_user_id(self, user_id: int, filters: TransactionFilters | None = None) -> list[models.Expense]:
        q = (
            self._filtered(user_id, filters)
            .options(selectinload(models.Expense.category))
            .order_by(models.Expense.transaction_date.desc(), models.Expense.id.desc())
        )
        if filters is not None and filters.limit:
            page = max(filters.page or 1, 1)
            q = q.offset((page - 1) * filters.limit).limit(filters.limit)
        return q.all()

    def count_by_user_id(self, user_id: int, filters: TransactionFilters | None = None) -> int:
        return self._filtered(user_id, filters).count()

    def sum_by_user_id(self, user_id: int, filters: TransactionFilters | None = None) -> int:
        total = self._filtered(user_id, filters).with_entities(func.coalesce(func.sum(models.Expense.amount), 0)).scalar()
        return int(total or 0)

    def find_in_period(self, user_id: int, start: datetime, end: datetime) -> list[models.Expense]:
        return (
            self.db.query(models.Expense)
            .filter(
                models.Expense.user_id == user_id,
                models.Expense.transaction_date >= start,
                models.Expense.transaction_date < end,
            )
            .order_by(models.Expense.transaction_date, models.Expense.id)
            .all()
        )

    def update(self, expense: models.Expense, patch: dict[str, Any]) -> models.Expense:
        for key, value in patch.items():
            setattr(expense, key, value)
        self.db.flush()
        return expense

    def update_category(self, expense: models.Expense, category_id: int | None) -> models.Expense:
        return self.update(expense, {"category_id": category_id})

    def delete(self, expense: models.Expense) -> None:
        self.db.delete(expense)
        self.db.flush()

    def available_years(self, user_id: int) -> list[int]:
        year_col = extract("year", models.Expense.transaction_date)
        rows = (
            self.db.query(year_col)
            .filter(models.Expense.user_id == user_id)
            .distinct()
            .all()
        )
        return sorted({int(r[0]) for r in rows if r[0] is not None}, reverse=True)

    def totals_by_category(self, user_id: int, start: datetime, end: datetime) -> list[tuple[int | None, int, int]]:
        """``(category_id, total_amount, count)`` rows within ``[start, end)``."""
        rows = (
            self.db.query(
                models.Expense.category_id,
                func.coalesce(func.sum(models.Expense.amount), 0),
                func.count(models.Expense.id),
            )
            .filter(
                models.Expense.user_id == user_id,
                models.Expense.transaction_date >= start,
                models.Expense.transaction_date < end,
            )
            .group_by(models.Expense.category_id)
            .all()
        )
        return [(cid, int(total or 0), int(cnt or 0)) for cid, total, cnt in rows]
