"""
Keyword rule matcher tests
"""

from types import SimpleNamespace

from money_diary.services.category_matcher import find_matching_rule, match_category, sort_rules


def _rule(keyword: str, category_id: int, priority: int = 0, rule_id: int | None = None):
    return SimpleNamespace(id=rule_id, keyword=keyword, category_id=category_id, priority=priority)


AMAZON_PAY = 1
AMAZON = 2


class TestMatchCategory:
    def test_higher_priority_specific_keyword_wins(self):
        rules = [_rule("Amazon Pay", AMAZON_PAY, 20), _rule("Amazon", AMAZON, 10)]
        assert match_category("Amazon Pay", rules) == AMAZON_PAY

    def test_no_match_returns_none(self):
        rules = [_rule("Amazon Pay", AMAZON_PAY, 20), _rule("Amazon", AMAZON, 10)]
        assert match_category("Unknown Merchant", rules) is None

    def test_case_insensitive_substring(self):
        rules = [_rule("starbucks", 7)]
        assert match_category("STARBUCKS COFFEE 渋谷店", rules) == 7

    def test_input_order_is_respected(self):
        # the matcher does not sort: the first rule in the sequence wins
        rules = [_rule("Amazon", AMAZON, 10), _rule("Amazon Pay", AMAZON_PAY, 20)]
        assert match_category("Amazon Pay", rules) == AMAZON

    def test_empty_inputs(self):
        assert match_category("", [_rule("a", 1)]) is None
        assert match_category("anything", []) is None

    def test_blank_keyword_never_matches(self):
        assert find_matching_rule("ローソン", [_rule("", 1)]) is None


class TestSortRules:
    def test_priority_descending(self):
        rules = sort_rules([_rule("a", 1, 0, 1), _rule("b", 2, 30, 2), _rule("c", 3, 10, 3)])
        assert [r.keyword for r in rules] == ["b", "c", "a"]

    def test_ties_break_by_insertion_order(self):
        rules = sort_rules([_rule("late", 1, 5, 9), _rule("early", 2, 5, 3)])
        assert [r.keyword for r in rules] == ["early", "late"]
        assert match_category("early late", rules) == 2
