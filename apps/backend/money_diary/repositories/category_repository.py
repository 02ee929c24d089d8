from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy.orm import Session

from money_diary import models
from money_diary.core.config import settings


class CategoryRepository(Protocol):
    def find_by_user_id(self, user_id: int) -> list[models.Category]: ...
    def find_by_id(self, category_id: int) -> models.Category | None: ...
    def find_by_name(self, user_id: int, name: str) -> models.Category | None: ...
    def find_other(self, user_id: int) -> models.Category | None: ...
    def create(self, user_id: int, data: dict[str, Any]) -> models.Category: ...
    def update(self, category: models.Category, patch: dict[str, Any]) -> models.Category: ...
    def delete(self, category: models.Category) -> None: ...


class SqlCategoryRepository:
    """Categories owned by a user. Writes are flushed, never committed."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_user_id(self, user_id: int) -> list[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == user_id)
            .order_by(models.Category.display_order, models.Category.id)
            .all()
        )

    def find_by_id(self, category_id: int) -> models.Category | None:
        return self.db.get(models.Category, category_id)

    def find_by_name(self, user_id: int, name: str) -> models.Category | None:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == user_id, models.Category.name == name)
            .first()
        )

    def find_other(self, user_id: int) -> models.Category | None:
        """The user's fallback category: flagged ``is_other`` first, then by name."""
        flagged = (
            self.db.query(models.Category)
            .filter(models.Category.user_id == user_id, models.Category.is_other.is_(True))
            .order_by(models.Category.id)
            .first()
        )
        if flagged is not None:
            return flagged
        return self.find_by_name(user_id, settings.OTHER_CATEGORY_NAME)

    def create(self, user_id: int, data: dict[str, Any]) -> models.Category:
        row = models.Category(user_id=user_id, **data)
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, category: models.Category, patch: dict[str, Any]) -> models.Category:
        for key, value in patch.items():
            setattr(category, key, value)
        self.db.flush()
        return category

    def delete(self, category: models.Category) -> None:
        self.db.delete(category)
        self.db.flush()
