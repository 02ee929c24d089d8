"""
Keyword rule matching

Rules are evaluated in the order given; callers hand them over already
sorted by priority (highest first) with a deterministic tie-break, see
``rule_sort_key``.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar


class RuleLike(Protocol):
    keyword: str
    category_id: int
    priority: int


R = TypeVar("R", bound=RuleLike)


def rule_sort_key(rule) -> tuple:
    """Priority descending, then insertion order (id) ascending."""
    rule_id = getattr(rule, "id", None)
    return (-int(rule.priority or 0), rule_id if rule_id is not None else 0)


def sort_rules(rules: Iterable[R]) -> list[R]:
    return sorted(rules, key=rule_sort_key)


def find_matching_rule(merchant: str, rules: Sequence[R]) -> R | None:
    """Return the first rule whose keyword occurs in ``merchant`` (case-insensitive)."""
    if not merchant:
        return None
    lowered = merchant.lower()
    for rule in rules:
        keyword = (rule.keyword or "").lower()
        if keyword and keyword in lowered:
            return rule
    return None


def match_category(merchant: str, rules: Sequence[RuleLike]) -> int | None:
    """Category id of the first matching rule, or None."""
    rule = find_matching_rule(merchant, rules)
    return rule.category_id if rule is not None else None
