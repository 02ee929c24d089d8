"""
CategoryInitializationService tests
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from money_diary import models
from money_diary.repositories import SqlDefaultCategoryRuleRepository, SqlRuleRepository
from money_diary.seed import DEFAULT_CATEGORIES, DEFAULT_RULES
from money_diary.services import CategoryInitializationService


def _user_categories(db, user_id):
    return db.query(models.Category).filter(models.Category.user_id == user_id).all()


def _user_rules(db, user_id):
    return db.query(models.CategoryRule).filter(models.CategoryRule.user_id == user_id).all()


class TestInitializeForUser:
    def test_clones_defaults(self, db_session, user):
        result = CategoryInitializationService(db_session).initialize_for_user(user.id)

        assert result == {"categories_created": len(DEFAULT_CATEGORIES), "rules_created": len(DEFAULT_RULES)}
        categories = _user_categories(db_session, user.id)
        assert sorted(c.name for c in categories) == sorted(c["name"] for c in DEFAULT_CATEGORIES)
        assert all(c.is_default for c in categories)
        other = [c for c in categories if c.is_other]
        assert len(other) == 1 and other[0].name == "その他"
        assert other[0].display_order == 999

    def test_rules_point_at_user_categories(self, db_session, user):
        CategoryInitializationService(db_session).initialize_for_user(user.id)

        rule = (
            db_session.query(models.CategoryRule)
            .filter(models.CategoryRule.user_id == user.id, models.CategoryRule.keyword == "ローソン")
            .one()
        )
        assert rule.category.user_id == user.id
        assert rule.category.name == "日用品"
        assert rule.priority == 0

    def test_templates_untouched(self, db_session, user):
        before = [(c.id, c.name) for c in db_session.query(models.DefaultCategory).all()]
        CategoryInitializationService(db_session).initialize_for_user(user.id)
        after = [(c.id, c.name) for c in db_session.query(models.DefaultCategory).all()]
        assert before == after
        assert db_session.query(models.Category).filter(models.Category.user_id.is_(None)).count() == 0

    def test_idempotent(self, db_session, user):
        svc = CategoryInitializationService(db_session)
        svc.initialize_for_user(user.id)
        second = svc.initialize_for_user(user.id)

        assert second == {"categories_created": 0, "rules_created": 0}
        assert len(_user_categories(db_session, user.id)) == len(DEFAULT_CATEGORIES)
        assert len(_user_rules(db_session, user.id)) == len(DEFAULT_RULES)

    def test_users_are_isolated(self, db_session, user, other_user):
        svc = CategoryInitializationService(db_session)
        svc.initialize_for_user(user.id)
        svc.initialize_for_user(other_user.id)

        mine = {c.id for c in _user_categories(db_session, user.id)}
        theirs = {c.id for c in _user_categories(db_session, other_user.id)}
        assert len(mine) == len(theirs) == len(DEFAULT_CATEGORIES)
        assert mine.isdisjoint(theirs)
        assert all(r.category_id in theirs for r in _user_rules(db_session, other_user.id))

    def test_backfills_missing_rules_when_categories_exist(self, db_session, user):
        svc = CategoryInitializationService(db_session)
        svc.initialize_for_user(user.id)
        lost = (
            db_session.query(models.CategoryRule)
            .filter(models.CategoryRule.user_id == user.id, models.CategoryRule.keyword == "吉野家")
            .one()
        )
        db_session.delete(lost)
        db_session.commit()

        result = svc.initialize_for_user(user.id)

        assert result == {"categories_created": 0, "rules_created": 1}
        restored = (
            db_session.query(models.CategoryRule)
            .filter(models.CategoryRule.user_id == user.id, models.CategoryRule.keyword == "吉野家")
            .one()
        )
        assert restored.category.name == "食費"

    def test_renamed_category_rules_not_backfilled(self, db_session, user):
        svc = CategoryInitializationService(db_session)
        svc.initialize_for_user(user.id)
        food = (
            db_session.query(models.Category)
            .filter(models.Category.user_id == user.id, models.Category.name == "食費")
            .one()
        )
        food.name = "ごはん"
        db_session.query(models.CategoryRule).filter(
            models.CategoryRule.user_id == user.id, models.CategoryRule.keyword == "吉野家"
        ).delete()
        db_session.commit()

        result = svc.initialize_for_user(user.id)

        assert result["rules_created"] == 0

    def test_orphan_default_rule_skipped(self, db_session, user):
        orphan = SimpleNamespace(keyword="どこか", default_category_id=999_999, priority=5)
        with patch.object(
            SqlDefaultCategoryRuleRepository,
            "find_all",
            return_value=[orphan] + SqlDefaultCategoryRuleRepository(db_session).find_all(),
        ):
            result = CategoryInitializationService(db_session).initialize_for_user(user.id)

        assert result["rules_created"] == len(DEFAULT_RULES)
        keywords = {r.keyword for r in _user_rules(db_session, user.id)}
        assert "どこか" not in keywords

    def test_failure_rolls_back_everything(self, db_session, user):
        with patch.object(SqlRuleRepository, "create", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                CategoryInitializationService(db_session).initialize_for_user(user.id)

        assert _user_categories(db_session, user.id) == []
        assert _user_rules(db_session, user.id) == []

        # a later retry starts from scratch
        result = CategoryInitializationService(db_session).initialize_for_user(user.id)
        assert result["categories_created"] == len(DEFAULT_CATEGORIES)


def test_seed_defaults_is_idempotent(db_session):
    from money_diary.seed import seed_defaults

    seed_defaults(db_session)
    db_session.commit()

    assert db_session.query(models.DefaultCategory).count() == len(DEFAULT_CATEGORIES)
    assert db_session.query(models.DefaultCategoryRule).count() == len(DEFAULT_RULES)
