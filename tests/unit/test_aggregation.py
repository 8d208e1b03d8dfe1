"""Unit tests for period spending aggregations"""

import pytest
from datetime import date, datetime
from finance_tracker.domain.models import Card, Period, PerformanceTier, Transaction
from finance_tracker.domain.categorization import UNCATEGORIZED
from finance_tracker.domain.aggregation import (
    card_usage,
    category_comparison,
    filter_expenses,
    high_value_transactions,
    hour_slot,
    spending_by_category,
    spending_by_hour_slot,
    spending_by_merchant,
    spending_by_weekday,
    total_expense,
)

PERIOD = Period(start_date=date(2024, 3, 25), end_date=date(2024, 4, 25))


def _txn(txn_id: str, when: datetime, amount: int, merchant: str = "Shop", card_id: str = "card_main") -> Transaction:
    return Transaction(id=txn_id, date=when, merchant=merchant, amount=amount, card_id=card_id)


def test_total_expense_excludes_income():
    """Only negative amounts count as spending"""
    transactions = [
        _txn("1", datetime(2024, 4, 1), -1000),
        _txn("2", datetime(2024, 4, 2), 500),
        _txn("3", datetime(2024, 4, 3), -2000),
    ]

    assert total_expense(transactions, PERIOD) == 3000


def test_filter_expenses_respects_half_open_period():
    transactions = [
        _txn("before", datetime(2024, 3, 24, 23, 59), -100),
        _txn("first", datetime(2024, 3, 25, 0, 0), -200),
        _txn("last", datetime(2024, 4, 24, 23, 59), -300),
        _txn("after", datetime(2024, 4, 25, 0, 0), -400),
    ]

    assert [t.id for t in filter_expenses(transactions, PERIOD)] == ["first", "last"]


def test_empty_transactions_produce_empty_views():
    assert total_expense([], PERIOD) == 0
    assert spending_by_category([], PERIOD, []) == []
    assert spending_by_merchant([], PERIOD).top == []
    assert spending_by_merchant([], PERIOD).remainder_percent == 0
    assert spending_by_weekday([], PERIOD).dominant_weekday is None
    assert spending_by_hour_slot([], PERIOD).dominant_slot is None
    assert high_value_transactions([], PERIOD) == []
    assert category_comparison([], PERIOD, []) == []


def test_spending_by_category_groups_and_sorts(sample_transactions, sample_rules):
    breakdown = spending_by_category(sample_transactions, PERIOD, sample_rules)

    assert [c.category_id for c in breakdown] == [UNCATEGORIZED, "cat_food", "cat_transport", "cat_fixed"]
    assert [c.total for c in breakdown] == [400_000, 126_000, 25_000, 17_000]

    food = breakdown[1]
    assert [(s.sub_category_id, s.total) for s in food.sub_categories] == [
        ("sub_groceries", 120_000),
        ("sub_dining", 6_000),
    ]
    assert sum(c.percent for c in breakdown) == pytest.approx(100.0)


def test_spending_by_merchant_top_n_with_remainder(sample_transactions):
    ranking = spending_by_merchant(sample_transactions, PERIOD, limit=2)

    assert ranking.period_total == 568_000
    assert [(m.merchant, m.total) for m in ranking.top] == [("Unknown Shop", 400_000), ("E-Mart", 120_000)]
    assert ranking.remainder_percent == pytest.approx(100 - 520_000 / 568_000 * 100)


def test_spending_by_merchant_trims_names():
    transactions = [
        _txn("1", datetime(2024, 4, 1), -1000, merchant="  Netflix "),
        _txn("2", datetime(2024, 4, 2), -1000, merchant="Netflix"),
        _txn("3", datetime(2024, 4, 3), -500, merchant="   "),
    ]

    ranking = spending_by_merchant(transactions, PERIOD)

    assert [(m.merchant, m.total) for m in ranking.top] == [("Netflix", 2000), ("Unknown", 500)]
    assert ranking.remainder_percent == pytest.approx(0.0)


def test_spending_by_weekday_uses_sunday_first_index(sample_transactions):
    breakdown = spending_by_weekday(sample_transactions, PERIOD)
    totals = {d.weekday: d.total for d in breakdown.days}

    assert len(breakdown.days) == 7
    assert totals[1] == 6_000  # Monday 2024-04-01
    assert totals[3] == 417_000  # Wednesdays 2024-03-27 and 2024-04-10
    assert totals[6] == 145_000  # Saturday 2024-04-06
    assert totals[0] == 0
    assert breakdown.dominant_weekday == 3


@pytest.mark.parametrize(
    "hour,slot",
    [
        (6, "morning"),
        (10, "morning"),
        (11, "lunch"),
        (14, "afternoon"),
        (18, "evening"),
        (21, "evening"),
        (22, "late_night"),
        (0, "late_night"),
        (1, "late_night"),
        (2, "dawn"),
        (5, "dawn"),
    ],
)
def test_hour_slot_boundaries(hour, slot):
    assert hour_slot(hour) == slot


def test_spending_by_hour_slot(sample_transactions):
    breakdown = spending_by_hour_slot(sample_transactions, PERIOD)
    totals = {s.slot: s.total for s in breakdown.slots}

    assert [s.slot for s in breakdown.slots] == ["morning", "lunch", "afternoon", "evening", "late_night", "dawn"]
    assert totals == {
        "morning": 23_000,
        "lunch": 400_000,
        "afternoon": 0,
        "evening": 120_000,
        "late_night": 25_000,
        "dawn": 0,
    }
    assert breakdown.dominant_slot == "lunch"


def test_card_usage_limits_and_tiers(sample_transactions, sample_cards):
    usage = card_usage(sample_transactions, PERIOD, sample_cards)

    main, sub = usage
    assert main.card_id == "card_main"
    assert main.used_amount == 543_000
    assert main.remaining_limit == 457_000
    assert main.limit_percent == pytest.approx(54.3)
    assert [t.amount for t in main.tiers] == [300_000, 600_000]
    assert [t.amount for t in main.achieved_tiers] == [300_000]
    assert main.next_tier.amount == 600_000
    assert main.next_tier_gap == 57_000
    assert main.performance_percent == pytest.approx(90.5)

    # Zero limit never divides by zero
    assert sub.used_amount == 25_000
    assert sub.limit_percent == 0
    assert sub.next_tier is None
    assert sub.performance_percent == 0


def test_card_usage_all_tiers_achieved_caps_performance():
    card = Card(
        id="c",
        name="Gold",
        credit_limit=500_000,
        due_day=1,
        performance_tiers=[PerformanceTier(amount=100_000, benefit="5%")],
    )
    transactions = [_txn("1", datetime(2024, 4, 1), -250_000, card_id="c")]

    (usage,) = card_usage(transactions, PERIOD, [card])

    assert len(usage.achieved_tiers) == 1
    assert usage.next_tier is None
    assert usage.next_tier_gap is None
    assert usage.performance_percent == 100.0


def test_card_usage_ignores_deleted_cards(sample_cards):
    transactions = [_txn("1", datetime(2024, 4, 1), -1000, card_id="deleted")]

    usage = card_usage(transactions, PERIOD, sample_cards)

    assert all(u.used_amount == 0 for u in usage)


def test_high_value_transactions(sample_transactions):
    items = high_value_transactions(sample_transactions, PERIOD, threshold=50_000, flag_threshold=300_000)

    assert [(i.transaction.id, i.is_flagged) for i in items] == [("u1", True), ("m1", False)]


def test_category_comparison_against_previous_window(sample_transactions, sample_rules):
    changes = category_comparison(sample_transactions, PERIOD, sample_rules)
    by_id = {c.category_id: c for c in changes}

    assert [c.category_id for c in changes] == [UNCATEGORIZED, "cat_food", "cat_transport", "cat_fixed"]
    assert by_id[UNCATEGORIZED].previous == 60_000  # Phone Co on 2024-03-10
    assert by_id[UNCATEGORIZED].diff == 340_000
    assert by_id["cat_food"].percent == 100.0  # nothing last period
    assert by_id["cat_fixed"].diff == 0
    assert by_id["cat_fixed"].percent == 0.0
