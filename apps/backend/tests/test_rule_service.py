import pytest

from money_diary import models, schemas
from money_diary.exceptions import ForbiddenError, NotFoundError
from money_diary.services import RuleService


def _category(db, user_id, name):
    return (
        db.query(models.Category)
        .filter(models.Category.user_id == user_id, models.Category.name == name)
        .one()
    )


def test_list_orders_by_priority(db_session, initialized_user):
    svc = RuleService(db_session)
    fun = _category(db_session, initialized_user.id, "娯楽")
    svc.create(initialized_user.id, schemas.RuleCreate(keyword="Netflix", category_id=fun.id, priority=50))

    rules = svc.list_for_user(initialized_user.id)
    assert rules[0].keyword == "Netflix"
    assert rules[0].category_name == "娯楽"
    assert [r.priority for r in rules] == sorted((r.priority for r in rules), reverse=True)


def test_system_rules_are_listed(db_session, initialized_user):
    shared = models.Category(user_id=None, name="寄付", color="#123456")
    db_session.add(shared)
    db_session.flush()
    db_session.add(models.CategoryRule(user_id=None, keyword="赤十字", category_id=shared.id))
    db_session.commit()

    keywords = {r.keyword for r in RuleService(db_session).list_for_user(initialized_user.id)}
    assert "赤十字" in keywords


def test_create_strips_keyword(db_session, initialized_user):
    fun = _category(db_session, initialized_user.id, "娯楽")
    rule = RuleService(db_session).create(
        initialized_user.id, schemas.RuleCreate(keyword="  Spotify ", category_id=fun.id)
    )
    assert rule.keyword == "Spotify"
    assert rule.user_id == initialized_user.id


def test_create_with_foreign_category(db_session, initialized_user, other_user):
    fun = _category(db_session, initialized_user.id, "娯楽")
    with pytest.raises(NotFoundError):
        RuleService(db_session).create(other_user.id, schemas.RuleCreate(keyword="x", category_id=fun.id))


def test_update_and_delete_own_rule(db_session, initialized_user):
    svc = RuleService(db_session)
    rule = svc.list_for_user(initialized_user.id)[0]
    daily = _category(db_session, initialized_user.id, "日用品")

    updated = svc.update(initialized_user.id, rule.id, schemas.RuleUpdate(priority=7, category_id=daily.id))
    assert (updated.priority, updated.category_id) == (7, daily.id)

    svc.delete(initialized_user.id, rule.id)
    assert db_session.get(models.CategoryRule, rule.id) is None


def test_cannot_change_others_rules(db_session, initialized_user, other_user):
    svc = RuleService(db_session)
    rule = svc.list_for_user(initialized_user.id)[0]
    with pytest.raises(ForbiddenError):
        svc.update(other_user.id, rule.id, schemas.RuleUpdate(priority=1))
    with pytest.raises(ForbiddenError):
        svc.delete(other_user.id, rule.id)
    with pytest.raises(NotFoundError):
        svc.delete(initialized_user.id, 987654)


def test_deleting_category_removes_its_rules(db_session, initialized_user):
    custom = models.Category(user_id=initialized_user.id, name="サブスク", color="#101010")
    db_session.add(custom)
    db_session.commit()
    RuleService(db_session).create(initialized_user.id, schemas.RuleCreate(keyword="Hulu", category_id=custom.id))

    db_session.execute(models.Category.__table__.delete().where(models.Category.id == custom.id))
    db_session.commit()

    remaining = db_session.query(models.CategoryRule).filter(models.CategoryRule.keyword == "Hulu").count()
    assert remaining == 0


def test_list_by_category(db_session, initialized_user):
    food = _category(db_session, initialized_user.id, "食費")
    rules = RuleService(db_session).list_for_user(initialized_user.id, category_id=food.id)
    assert {r.keyword for r in rules} == {"マクドナルド", "吉野家", "スターバックス"}
