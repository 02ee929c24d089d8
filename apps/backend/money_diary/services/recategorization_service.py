from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from money_diary import schemas
from money_diary.repositories import SqlRuleRepository, SqlTransactionRepository
from money_diary.services.category_matcher import match_category, sort_rules
from money_diary.utils.periods import period_bounds

logger = logging.getLogger(__name__)


class ReCategorizationService:
    """Re-apply the current rule set to already imported transactions."""

    def __init__(
        self,
        db: Session,
        rule_repository: SqlRuleRepository | None = None,
        transaction_repository: SqlTransactionRepository | None = None,
    ) -> None:
        self.db = db
        self.rules = rule_repository or SqlRuleRepository(db)
        self.transactions = transaction_repository or SqlTransactionRepository(db)

    def re_categorize_by_rules(self, user_id: int, year: int, month: int | None = None) -> int:
        """
        Returns the number of transactions whose category changed.

        Transactions without a matching rule keep their current category.
        """
        rules = sort_rules(self.rules.find_by_user_id(user_id))
        if not rules:
            return 0

        start, end = period_bounds(year, month)
        updated = 0
        try:
            for expense in self.transactions.find_in_period(user_id, start, end):
                category_id = match_category(expense.merchant, rules)
                if category_id is None or category_id == expense.category_id:
                    continue
                self.transactions.update_category(expense, category_id)
                updated += 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("re-categorized %d transactions for user %s (%s/%s)", updated, user_id, year, month or "*")
        return updated

    def execute(self, user_id: int, payload: schemas.ReCategorizeRequest) -> schemas.ReCategorizeResult:
        count = self.re_categorize_by_rules(user_id, payload.year, payload.month)
        return schemas.ReCategorizeResult(
            message=f"{count}件の取引を再分類しました。",
            updated_count=count,
        )
