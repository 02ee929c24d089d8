from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from money_diary import models, schemas
from money_diary.core.config import settings
from money_diary.exceptions import ForbiddenError, NotFoundError
from money_diary.repositories import SqlCategoryRepository, SqlTransactionRepository, TransactionFilters
from money_diary.utils.periods import period_bounds

_MANUAL_ONLY_FIELDS = ("transaction_date", "merchant", "amount")


class TransactionService:
    """Listing, manual entry and edits of persisted transactions.

    Imported transactions are immutable apart from their category; only
    manual (cash) entries may be edited freely or deleted.
    """

    def __init__(
        self,
        db: Session,
        transaction_repository: SqlTransactionRepository | None = None,
        category_repository: SqlCategoryRepository | None = None,
    ) -> None:
        self.db = db
        self.transactions = transaction_repository or SqlTransactionRepository(db)
        self.categories = category_repository or SqlCategoryRepository(db)

    def ensure_user_can_access(self, user_id: int, expense_id: int) -> models.Expense:
        expense = self.transactions.find_by_id(expense_id)
        if expense is None:
            raise NotFoundError("Transaction not found")
        if expense.user_id != user_id:
            raise ForbiddenError("You do not have access to this transaction")
        return expense

    def _ensure_category(self, user_id: int, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        category = self.categories.find_by_id(category_id)
        if category is None or not category.visible_to(user_id):
            raise NotFoundError("Category not found")

    def list_for_user(self, user_id: int, filters: TransactionFilters) -> schemas.TransactionListOut:
        items = self.transactions.find_by_user_id(user_id, filters)
        return schemas.TransactionListOut(
            items=[schemas.TransactionOut.model_validate(i) for i in items],
            total=self.transactions.count_by_user_id(user_id, filters),
            total_amount=self.transactions.sum_by_user_id(user_id, filters),
            page=filters.page or 1,
            limit=filters.limit,
        )

    def create_manual(self, user_id: int, payload: schemas.TransactionCreate) -> models.Expense:
        category_id = payload.category_id
        if category_id is None:
            other = self.categories.find_other(user_id)
            category_id = other.id if other is not None else None
        else:
            self._ensure_category(user_id, category_id)
        row = self.transactions.create(
            {
                "user_id": user_id,
                "transaction_date": payload.transaction_date.replace(tzinfo=None),
                "merchant": payload.merchant,
                "amount": payload.amount,
                "category_id": category_id,
                "payment_method": settings.MANUAL_PAYMENT_METHOD,
                "external_transaction_id": None,
            }
        )
        self.db.commit()
        self.db.refresh(row)
        return row

    def update(self, user_id: int, expense_id: int, payload: schemas.TransactionUpdate) -> models.Expense:
        expense = self.ensure_user_can_access(user_id, expense_id)
        patch = payload.model_dump(exclude_unset=True)
        if any(patch.get(f) is not None for f in _MANUAL_ONLY_FIELDS) and not expense.is_manual():
            raise ForbiddenError("Only the category of an imported transaction can be changed")
        if "category_id" in patch:
            self._ensure_category(user_id, patch["category_id"])
        if patch.get("transaction_date") is not None:
            patch["transaction_date"] = patch["transaction_date"].replace(tzinfo=None)
        patch = {k: v for k, v in patch.items() if v is not None or k == "category_id"}
        self.transactions.update(expense, patch)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete(self, user_id: int, expense_id: int) -> None:
        expense = self.ensure_user_can_access(user_id, expense_id)
        if not expense.is_manual():
            raise ForbiddenError("Only cash transactions can be deleted")
        self.transactions.delete(expense)
        self.db.commit()

    def available_years(self, user_id: int) -> list[int]:
        return self.transactions.available_years(user_id)

    def summary(self, user_id: int, year: int, month: Optional[int] = None) -> schemas.TransactionSummaryOut:
        start, end = period_bounds(year, month)
        rows = self.transactions.totals_by_category(user_id, start, end)
        items: list[schemas.CategorySummaryItem] = []
        for category_id, total, count in rows:
            category = self.categories.find_by_id(category_id) if category_id is not None else None
            items.append(
                schemas.CategorySummaryItem(
                    category_id=category_id,
                    category_name=category.name if category else None,
                    category_color=category.color if category else None,
                    total_amount=total,
                    count=count,
                )
            )
        items.sort(key=lambda i: (-i.total_amount, i.category_id or 0))
        return schemas.TransactionSummaryOut(
            year=year,
            month=month,
            total_amount=sum(i.total_amount for i in items),
            transaction_count=sum(i.count for i in items),
            categories=items,
            monthly_breakdown=self._monthly_breakdown(user_id, start, end) if month is None else [],
        )

    def _monthly_breakdown(self, user_id: int, start: datetime, end: datetime) -> list[schemas.MonthlyBreakdownItem]:
        """Per-month totals with a per-category split, months ascending; empty months omitted."""
        months: dict[int, dict[Optional[int], schemas.MonthlyCategoryAmount]] = {}
        for expense in self.transactions.find_in_period(user_id, start, end):
            by_category = months.setdefault(expense.transaction_date.month, {})
            entry = by_category.get(expense.category_id)
            if entry is None:
                entry = by_category[expense.category_id] = schemas.MonthlyCategoryAmount(
                    category_id=expense.category_id,
                    category_name=expense.category_name,
                    category_color=expense.category_color,
                    display_order=expense.display_order,
                    amount=0,
                )
            entry.amount += expense.amount

        breakdown: list[schemas.MonthlyBreakdownItem] = []
        for month_no in sorted(months):
            # uncategorized last, then display order
            categories = sorted(
                months[month_no].values(),
                key=lambda c: (c.category_id is None, c.display_order, c.category_id or 0),
            )
            breakdown.append(
                schemas.MonthlyBreakdownItem(
                    month=month_no,
                    total_amount=sum(c.amount for c in categories),
                    categories=categories,
                )
            )
        return breakdown
