"""Unit tests for rule-based merchant classification"""

import pytest
from finance_tracker.domain.models import CategoryRule
from finance_tracker.domain.categorization import (
    UNCATEGORIZED,
    add_rule,
    classify,
    invalid_rules,
    remove_rule,
    validate_pattern,
)
from finance_tracker.domain.exceptions import InvalidRulePatternError


def test_classify_first_match_wins():
    """A merchant matching both rules takes the one higher in the list"""
    rules = [
        CategoryRule(id="a", pattern="X", category_id="cat_a"),
        CategoryRule(id="b", pattern=".*", category_id="cat_b"),
    ]

    match = classify("XYZ Store", rules)

    assert match.category_id == "cat_a"
    assert match.rule.id == "a"
    assert match.matched is True


def test_classify_falls_back_to_uncategorized():
    rules = [CategoryRule(id="a", pattern="netflix", category_id="cat_fixed")]

    match = classify("Corner Bakery", rules)

    assert match.category_id == UNCATEGORIZED
    assert match.sub_category_id is None
    assert match.rule is None
    assert match.matched is False


def test_classify_empty_rule_list():
    assert classify("Anything", []).category_id == UNCATEGORIZED


def test_classify_is_case_insensitive(sample_rules):
    match = classify("NETFLIX.COM", sample_rules)

    assert match.category_id == "cat_fixed"
    assert match.sub_category_id == "sub_etc"


def test_classify_searches_anywhere_unless_anchored(sample_rules):
    assert classify("Seoul Starbucks #12", sample_rules).sub_category_id == "sub_dining"
    assert classify("emart24", sample_rules).sub_category_id == "sub_groceries"
    assert classify("Shinsegae E-Mart", sample_rules).category_id == UNCATEGORIZED


def test_invalid_pattern_is_skipped_not_raised():
    """A stored rule that does not compile never matches and never stops classification"""
    rules = [
        CategoryRule(id="bad", pattern="([unclosed", category_id="cat_bad"),
        CategoryRule(id="good", pattern="mart", category_id="cat_food"),
    ]

    assert classify("E-Mart", rules).category_id == "cat_food"
    assert classify("Bakery", rules).category_id == UNCATEGORIZED
    assert invalid_rules(rules) == [rules[0]]


def test_inactive_rules_are_ignored():
    rules = [
        CategoryRule(id="off", pattern="mart", category_id="cat_off", active=False),
        CategoryRule(id="on", pattern="mart", category_id="cat_on"),
    ]

    assert classify("E-Mart", rules).category_id == "cat_on"


def test_classify_reflects_new_rule_list_version():
    """Compiled patterns are cached per list; a changed list is recompiled"""
    rules = [CategoryRule(id="a", pattern="coffee", category_id="cat_food")]
    assert classify("Coffee Bean", rules).category_id == "cat_food"

    updated = add_rule(rules, "bean", "cat_treats")
    assert classify("Coffee Bean", updated).category_id == "cat_treats"


def test_add_rule_prepends_with_highest_priority(sample_rules):
    updated = add_rule(sample_rules, "starbucks", "cat_habit", "sub_habit", rule_id="new")

    assert updated[0] == CategoryRule(
        id="new", pattern="starbucks", category_id="cat_habit", sub_category_id="sub_habit", active=True
    )
    assert updated[1:] == sample_rules
    assert len(sample_rules) == 4  # input untouched
    assert classify("Starbucks", updated).category_id == "cat_habit"


def test_add_rule_generates_id(sample_rules):
    updated = add_rule(sample_rules, "gs25", "cat_shopping")

    assert updated[0].id
    assert updated[0].id not in {r.id for r in sample_rules}


@pytest.mark.parametrize("pattern", ["([unclosed", "*start", "", "   "])
def test_add_rule_rejects_invalid_pattern(sample_rules, pattern):
    with pytest.raises(InvalidRulePatternError):
        add_rule(sample_rules, pattern, "cat_food")


def test_validate_pattern_compiles_case_insensitive():
    regex = validate_pattern("uber")

    assert regex.search("UBER TRIP")


def test_remove_rule(sample_rules):
    updated = remove_rule(sample_rules, "r_coffee")

    assert [r.id for r in updated] == ["r_netflix", "r_mart", "r_taxi"]
    assert remove_rule(sample_rules, "missing") == sample_rules
