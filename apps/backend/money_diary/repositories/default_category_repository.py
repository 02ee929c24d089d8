from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from money_diary import models


class DefaultCategoryRepository(Protocol):
    def find_all(self) -> list[models.DefaultCategory]: ...


class DefaultCategoryRuleRepository(Protocol):
    def find_all(self) -> list[models.DefaultCategoryRule]: ...


class SqlDefaultCategoryRepository:
    """Read-only access to the system category templates."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_all(self) -> list[models.DefaultCategory]:
        return (
            self.db.query(models.DefaultCategory)
            .order_by(models.DefaultCategory.display_order, models.DefaultCategory.id)
            .all()
        )


class SqlDefaultCategoryRuleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_all(self) -> list[models.DefaultCategoryRule]:
        return (
            self.db.query(models.DefaultCategoryRule)
            .order_by(models.DefaultCategoryRule.priority.desc(), models.DefaultCategoryRule.id)
            .all()
        )
