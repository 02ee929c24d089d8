"""
ReCategorizationService tests
"""

from datetime import datetime

from money_diary import models, schemas
from money_diary.services import ReCategorizationService


def _category_id(db, user_id, name):
    return (
        db.query(models.Category)
        .filter(models.Category.user_id == user_id, models.Category.name == name)
        .one()
        .id
    )


def _add_expense(db, user_id, merchant, when, category_id=None, ext=None):
    row = models.Expense(
        user_id=user_id,
        transaction_date=when,
        amount=500,
        merchant=merchant,
        category_id=category_id,
        payment_method="PayPay残高",
        external_transaction_id=ext,
    )
    db.add(row)
    db.commit()
    return row


class TestReCategorizeByRules:
    def test_no_rules_is_noop(self, db_session, user):
        row = _add_expense(db_session, user.id, "ローソン", datetime(2024, 6, 1))

        assert ReCategorizationService(db_session).re_categorize_by_rules(user.id, 2024, 6) == 0
        db_session.refresh(row)
        assert row.category_id is None

    def test_matching_row_is_moved(self, db_session, initialized_user):
        uid = initialized_user.id
        other = _category_id(db_session, uid, "その他")
        row = _add_expense(db_session, uid, "ローソン 新宿店", datetime(2024, 6, 10), other)

        updated = ReCategorizationService(db_session).re_categorize_by_rules(uid, 2024, 6)

        assert updated == 1
        db_session.refresh(row)
        assert row.category_id == _category_id(db_session, uid, "日用品")

    def test_unmatched_and_unchanged_rows_are_not_counted(self, db_session, initialized_user):
        uid = initialized_user.id
        other = _category_id(db_session, uid, "その他")
        daily = _category_id(db_session, uid, "日用品")
        unknown = _add_expense(db_session, uid, "謎の店", datetime(2024, 6, 3), other)
        already = _add_expense(db_session, uid, "ローソン", datetime(2024, 6, 4), daily)

        updated = ReCategorizationService(db_session).re_categorize_by_rules(uid, 2024, 6)

        assert updated == 0
        db_session.refresh(unknown)
        db_session.refresh(already)
        assert unknown.category_id == other
        assert already.category_id == daily

    def test_month_window_is_half_open(self, db_session, initialized_user):
        uid = initialized_user.id
        inside = _add_expense(db_session, uid, "吉野家", datetime(2024, 6, 30, 23, 59, 59))
        after = _add_expense(db_session, uid, "吉野家", datetime(2024, 7, 1))
        before = _add_expense(db_session, uid, "吉野家", datetime(2024, 5, 31, 23, 59, 59))

        updated = ReCategorizationService(db_session).re_categorize_by_rules(uid, 2024, 6)

        assert updated == 1
        food = _category_id(db_session, uid, "食費")
        for row in (inside, after, before):
            db_session.refresh(row)
        assert inside.category_id == food
        assert after.category_id is None
        assert before.category_id is None

    def test_whole_year(self, db_session, initialized_user):
        uid = initialized_user.id
        _add_expense(db_session, uid, "吉野家", datetime(2024, 1, 1))
        _add_expense(db_session, uid, "ドコモ", datetime(2024, 12, 31, 12, 0))
        _add_expense(db_session, uid, "ドコモ", datetime(2025, 1, 1))

        assert ReCategorizationService(db_session).re_categorize_by_rules(uid, 2024) == 2

    def test_new_rule_applies_to_old_rows(self, db_session, initialized_user):
        uid = initialized_user.id
        fun = _category_id(db_session, uid, "娯楽")
        row = _add_expense(db_session, uid, "映画館 TOHO", datetime(2024, 6, 5), _category_id(db_session, uid, "その他"))
        db_session.add(models.CategoryRule(user_id=uid, keyword="toho", category_id=fun, priority=5))
        db_session.commit()

        assert ReCategorizationService(db_session).re_categorize_by_rules(uid, 2024, 6) == 1
        db_session.refresh(row)
        assert row.category_id == fun

    def test_other_users_rows_untouched(self, db_session, initialized_user, other_user):
        row = _add_expense(db_session, other_user.id, "ローソン", datetime(2024, 6, 1))

        assert ReCategorizationService(db_session).re_categorize_by_rules(initialized_user.id, 2024, 6) == 0
        db_session.refresh(row)
        assert row.category_id is None


class TestExecute:
    def test_message(self, db_session, initialized_user):
        uid = initialized_user.id
        _add_expense(db_session, uid, "マクドナルド", datetime(2024, 3, 1))
        _add_expense(db_session, uid, "ＪＲ東日本", datetime(2024, 3, 2))

        result = ReCategorizationService(db_session).execute(uid, schemas.ReCategorizeRequest(year=2024, month=3))

        assert result.updated_count == 2
        assert result.message == "2件の取引を再分類しました。"
