from __future__ import annotations

from sqlalchemy.orm import Session

from money_diary import models, schemas
from money_diary.exceptions import ForbiddenError, NotFoundError
from money_diary.repositories import SqlCategoryRepository, SqlRuleRepository


class RuleService:
    """Rule CRUD. Users see system rules but may only change their own."""

    def __init__(
        self,
        db: Session,
        rule_repository: SqlRuleRepository | None = None,
        category_repository: SqlCategoryRepository | None = None,
    ) -> None:
        self.db = db
        self.rules = rule_repository or SqlRuleRepository(db)
        self.categories = category_repository or SqlCategoryRepository(db)

    def list_for_user(self, user_id: int, category_id: int | None = None) -> list[models.CategoryRule]:
        if category_id is not None:
            return self.rules.find_by_category_id(category_id, user_id)
        return self.rules.find_by_user_id(user_id)

    def _ensure_category_visible(self, user_id: int, category_id: int) -> None:
        category = self.categories.find_by_id(category_id)
        if category is None or not category.visible_to(user_id):
            raise NotFoundError("Category not found")

    def _get_owned(self, user_id: int, rule_id: int) -> models.CategoryRule:
        rule = self.rules.find_by_id(rule_id)
        if rule is None:
            raise NotFoundError("Rule not found")
        if rule.user_id != user_id:
            raise ForbiddenError("You do not have permission to modify this rule")
        return rule

    def create(self, user_id: int, payload: schemas.RuleCreate) -> models.CategoryRule:
        self._ensure_category_visible(user_id, payload.category_id)
        row = self.rules.create(user_id, payload.model_dump())
        self.db.commit()
        self.db.refresh(row)
        return row

    def update(self, user_id: int, rule_id: int, payload: schemas.RuleUpdate) -> models.CategoryRule:
        rule = self._get_owned(user_id, rule_id)
        patch = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "category_id" in patch:
            self._ensure_category_visible(user_id, patch["category_id"])
        self.rules.update(rule, patch)
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def delete(self, user_id: int, rule_id: int) -> None:
        rule = self._get_owned(user_id, rule_id)
        self.rules.delete(rule)
        self.db.commit()
