from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from money_diary import models


class RuleRepository(Protocol):
    def find_by_user_id(self, user_id: int) -> list[models.CategoryRule]: ...
    def find_by_id(self, rule_id: int) -> models.CategoryRule | None: ...
    def find_by_category_id(self, category_id: int, user_id: int) -> list[models.CategoryRule]: ...
    def find_by_user_id_and_keyword(self, user_id: int, keyword: str) -> models.CategoryRule | None: ...
    def create(self, user_id: int | None, data: dict[str, Any]) -> models.CategoryRule: ...
    def update(self, rule: models.CategoryRule, patch: dict[str, Any]) -> models.CategoryRule: ...
    def delete(self, rule: models.CategoryRule) -> None: ...


class SqlRuleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _visible(self, user_id: int):
        return self.db.query(models.CategoryRule).filter(
            or_(models.CategoryRule.user_id.is_(None), models.CategoryRule.user_id == user_id)
        )

    def find_by_user_id(self, user_id: int) -> list[models.CategoryRule]:
        """System and user rules, highest priority first, oldest first on ties."""
        return (
            self._visible(user_id)
            .options(selectinload(models.CategoryRule.category))
            .order_by(models.CategoryRule.priority.desc(), models.CategoryRule.id.asc())
            .all()
        )

    def find_by_id(self, rule_id: int) -> models.CategoryRule | None:
        return self.db.get(models.CategoryRule, rule_id)

    def find_by_category_id(self, category_id: int, user_id: int) -> list[models.CategoryRule]:
        return (
            self._visible(user_id)
            .filter(models.CategoryRule.category_id == category_id)
            .order_by(models.CategoryRule.priority.desc(), models.CategoryRule.id.asc())
            .all()
        )

    def find_by_user_id_and_keyword(self, user_id: int, keyword: str) -> models.CategoryRule | None:
        return (
            self.db.query(models.CategoryRule)
            .filter(models.CategoryRule.user_id == user_id, models.CategoryRule.keyword == keyword)
            .first()
        )

    def create(self, user_id: int | None, data: dict[str, Any]) -> models.CategoryRule:
        row = models.CategoryRule(user_id=user_id, **data)
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, rule: models.CategoryRule, patch: dict[str, Any]) -> models.CategoryRule:
        for key, value in patch.items():
            setattr(rule, key, value)
        self.db.flush()
        return rule

    def delete(self, rule: models.CategoryRule) -> None:
        self.db.delete(rule)
        self.db.flush()
