from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from money_diary.parsers.paypay import CsvParseResult, ParsedExpense, parse_paypay_csv
from money_diary.repositories import SqlCategoryRepository, SqlRuleRepository
from money_diary.services.category_matcher import match_category, sort_rules


class CsvService:
    """Parsing and merchant -> category assignment for one upload."""

    def __init__(
        self,
        db: Session,
        rule_repository: SqlRuleRepository | None = None,
        category_repository: SqlCategoryRepository | None = None,
    ) -> None:
        self.rules = rule_repository or SqlRuleRepository(db)
        self.categories = category_repository or SqlCategoryRepository(db)

    def parse_csv(self, content: str) -> CsvParseResult:
        return parse_paypay_csv(content)

    def assign_categories(self, expenses: Iterable[ParsedExpense], user_id: int) -> dict[str, int | None]:
        """Map each distinct merchant to a category id.

        Rules are read once per call; a merchant seen again in the batch reuses
        the first result. Unmatched merchants fall back to the user's "Other"
        category, or None when it does not exist.
        """
        rules = sort_rules(self.rules.find_by_user_id(user_id))
        other = self.categories.find_other(user_id)
        fallback_id = other.id if other is not None else None

        assignments: dict[str, int | None] = {}
        for expense in expenses:
            if expense.merchant in assignments:
                continue
            category_id = match_category(expense.merchant, rules)
            assignments[expense.merchant] = category_id if category_id is not None else fallback_id
        return assignments
