"""Merchant-to-category classification using an ordered list of regex rules"""

import logging
import re
import uuid
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence, Tuple
from finance_tracker.domain.models import CategoryMatch, CategoryRule
from finance_tracker.domain.exceptions import InvalidRulePatternError

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"

CompiledRule = Tuple[CategoryRule, Pattern[str]]


def validate_pattern(pattern: str) -> Pattern[str]:
    """
    Compile a rule pattern the way classification will use it.

    Raises:
        InvalidRulePatternError: pattern is blank or not a valid regular expression
    """
    if not pattern or not pattern.strip():
        raise InvalidRulePatternError(pattern, "pattern must not be empty")
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise InvalidRulePatternError(pattern, str(e)) from e


@lru_cache(maxsize=32)
def _compile_rules(rules: Tuple[CategoryRule, ...]) -> Tuple[CompiledRule, ...]:
    """Compile a rule list once per version. Bad and inactive rules are dropped."""
    compiled = []
    for rule in rules:
        if not rule.active:
            continue
        try:
            compiled.append((rule, re.compile(rule.pattern, re.IGNORECASE)))
        except re.error as e:
            logger.warning(
                "Skipping category rule with invalid pattern",
                extra={"rule_id": rule.id, "pattern": rule.pattern, "reason": str(e)},
            )
    return tuple(compiled)


def invalid_rules(rules: Sequence[CategoryRule]) -> List[CategoryRule]:
    """Rules whose pattern does not compile (legacy data saved before validation)"""
    bad = []
    for rule in rules:
        try:
            re.compile(rule.pattern, re.IGNORECASE)
        except re.error:
            bad.append(rule)
    return bad


def classify(merchant: str, rules: Sequence[CategoryRule]) -> CategoryMatch:
    """
    Classify a merchant by the first matching rule (top of the list wins).

    Patterns are case-insensitive searches. A rule whose pattern does not
    compile never matches; it does not stop classification. With no match the
    result is the UNCATEGORIZED sentinel, so every merchant gets a category.
    """
    for rule, regex in _compile_rules(tuple(rules)):
        if regex.search(merchant):
            return CategoryMatch(
                category_id=rule.category_id,
                sub_category_id=rule.sub_category_id,
                rule=rule,
            )
    return CategoryMatch(category_id=UNCATEGORIZED)


def add_rule(
    rules: Sequence[CategoryRule],
    pattern: str,
    category_id: str,
    sub_category_id: Optional[str] = None,
    rule_id: Optional[str] = None,
) -> List[CategoryRule]:
    """Return a new rule list with a validated rule prepended at highest priority"""
    validate_pattern(pattern)
    new_rule = CategoryRule(
        id=rule_id or str(uuid.uuid4()),
        pattern=pattern,
        category_id=category_id,
        sub_category_id=sub_category_id,
        active=True,
    )
    return [new_rule, *rules]


def remove_rule(rules: Sequence[CategoryRule], rule_id: str) -> List[CategoryRule]:
    """Return a new rule list without the given rule"""
    return [rule for rule in rules if rule.id != rule_id]
