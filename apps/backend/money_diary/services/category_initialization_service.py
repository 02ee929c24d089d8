"""
Per-user category initialization

Clones the system default categories and rules into a new user's namespace.

Responsibilities:
- clone every default category exactly once (skipped when the user already
  has categories)
- build the default-category-id -> user-category-id mapping
- create the user-owned copy of every default rule whose category is mapped
- run everything in one unit of work; any failure rolls back all of it
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from money_diary import models
from money_diary.repositories import (
    SqlCategoryRepository,
    SqlDefaultCategoryRepository,
    SqlDefaultCategoryRuleRepository,
    SqlRuleRepository,
)

logger = logging.getLogger(__name__)


class CategoryInitializationService:
    def __init__(
        self,
        db: Session,
        category_repository: SqlCategoryRepository | None = None,
        rule_repository: SqlRuleRepository | None = None,
        default_category_repository: SqlDefaultCategoryRepository | None = None,
        default_rule_repository: SqlDefaultCategoryRuleRepository | None = None,
    ) -> None:
        self.db = db
        self.categories = category_repository or SqlCategoryRepository(db)
        self.rules = rule_repository or SqlRuleRepository(db)
        self.default_categories = default_category_repository or SqlDefaultCategoryRepository(db)
        self.default_rules = default_rule_repository or SqlDefaultCategoryRuleRepository(db)

    def initialize_for_user(self, user_id: int) -> dict[str, int]:
        """
        Initialize categories and rules for ``user_id`` (idempotent).

        Returns:
            {"categories_created": int, "rules_created": int}
        """
        try:
            existing = self.categories.find_by_user_id(user_id)
            defaults = self.default_categories.find_all()

            if existing:
                logger.info("user %s already has %d categories; skipping clone", user_id, len(existing))
                category_id_map = self._map_existing_by_name(existing, defaults)
                categories_created = 0
            else:
                category_id_map = self._clone_categories(user_id, defaults)
                categories_created = len(category_id_map)

            rules_created = self._ensure_rules(user_id, category_id_map)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "initialized user %s: %d categories, %d rules",
            user_id,
            categories_created,
            rules_created,
        )
        return {"categories_created": categories_created, "rules_created": rules_created}

    # ==================== Private Methods ====================

    def _clone_categories(self, user_id: int, defaults: list[models.DefaultCategory]) -> dict[int, int]:
        mapping: dict[int, int] = {}
        for default in defaults:
            created = self.categories.create(
                user_id,
                {
                    "name": default.name,
                    "color": default.color,
                    "icon": default.icon,
                    "display_order": default.display_order,
                    "is_default": True,
                    "is_other": default.is_other,
                },
            )
            mapping[default.id] = created.id
        return mapping

    def _map_existing_by_name(
        self,
        existing: list[models.Category],
        defaults: list[models.DefaultCategory],
    ) -> dict[int, int]:
        """Re-derive the clone mapping from (name, is_other) of default-flagged categories.

        A cloned category the user has renamed no longer maps, so its rules are
        not backfilled.
        """
        by_key = {(c.name, c.is_other): c.id for c in existing if c.is_default}
        mapping: dict[int, int] = {}
        for default in defaults:
            category_id = by_key.get((default.name, default.is_other))
            if category_id is not None:
                mapping[default.id] = category_id
        return mapping

    def _ensure_rules(self, user_id: int, category_id_map: dict[int, int]) -> int:
        created = 0
        for default_rule in self.default_rules.find_all():
            category_id = category_id_map.get(default_rule.default_category_id)
            if category_id is None:
                logger.warning(
                    "skipping default rule %r for user %s: default category %s not mapped",
                    default_rule.keyword,
                    user_id,
                    default_rule.default_category_id,
                )
                continue
            if self.rules.find_by_user_id_and_keyword(user_id, default_rule.keyword):
                continue
            self.rules.create(
                user_id,
                {
                    "keyword": default_rule.keyword,
                    "category_id": category_id,
                    "priority": default_rule.priority,
                },
            )
            created += 1
        return created
