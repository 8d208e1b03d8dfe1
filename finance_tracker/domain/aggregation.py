"""Spending aggregations over one billing period - pure functions over a transaction snapshot"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple
from finance_tracker.domain.models import (
    Card,
    CardUsage,
    CategoryChange,
    CategoryRule,
    CategoryTotal,
    HighValueTransaction,
    HourSlotBreakdown,
    HourSlotTotal,
    MerchantRanking,
    MerchantTotal,
    Period,
    SubCategoryTotal,
    Transaction,
    WeekdayBreakdown,
    WeekdayTotal,
)
from finance_tracker.domain.categorization import classify
from finance_tracker.domain.periods import preceding_window

UNKNOWN_MERCHANT = "Unknown"

# (name, start hour, end hour); late_night wraps past midnight
HOUR_SLOTS: List[Tuple[str, int, int]] = [
    ("morning", 6, 11),
    ("lunch", 11, 14),
    ("afternoon", 14, 18),
    ("evening", 18, 22),
    ("late_night", 22, 2),
    ("dawn", 2, 6),
]


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def filter_expenses(transactions: Sequence[Transaction], period: Period) -> List[Transaction]:
    """Expenses (amount < 0) dated inside [period.start_date, period.end_date)"""
    return [t for t in transactions if t.amount < 0 and period.contains(t.date)]


def total_expense(transactions: Sequence[Transaction], period: Period) -> int:
    """Sum of expense magnitudes in the period; income is ignored"""
    return sum(abs(t.amount) for t in filter_expenses(transactions, period))


def spending_by_category(
    transactions: Sequence[Transaction],
    period: Period,
    rules: Sequence[CategoryRule],
) -> List[CategoryTotal]:
    """Classify each period expense and total it by category, then by sub-category"""
    totals: Dict[str, int] = defaultdict(int)
    sub_totals: Dict[str, Dict[Optional[str], int]] = defaultdict(lambda: defaultdict(int))

    expenses = filter_expenses(transactions, period)
    for txn in expenses:
        match = classify(txn.merchant, rules)
        amount = abs(txn.amount)
        totals[match.category_id] += amount
        sub_totals[match.category_id][match.sub_category_id] += amount

    period_total = sum(totals.values())
    result = []
    for category_id, total in totals.items():
        subs = [
            SubCategoryTotal(sub_category_id=sub_id, total=sub_total, percent=_percent(sub_total, total))
            for sub_id, sub_total in sub_totals[category_id].items()
        ]
        subs.sort(key=lambda s: s.total, reverse=True)
        result.append(
            CategoryTotal(
                category_id=category_id,
                total=total,
                percent=_percent(total, period_total),
                sub_categories=subs,
            )
        )

    result.sort(key=lambda c: c.total, reverse=True)
    return result


def spending_by_merchant(
    transactions: Sequence[Transaction],
    period: Period,
    limit: int | None = 5,
) -> MerchantRanking:
    """
    Rank merchants by period spend.

    Merchants are grouped by their trimmed name. The remainder is the share of
    spend outside the returned top-N.
    """
    totals: Dict[str, int] = defaultdict(int)
    for txn in filter_expenses(transactions, period):
        name = txn.merchant.strip() or UNKNOWN_MERCHANT
        totals[name] += abs(txn.amount)

    period_total = sum(totals.values())
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]

    top = [
        MerchantTotal(merchant=name, total=total, percent=_percent(total, period_total))
        for name, total in ranked
    ]
    remainder = 100.0 - sum(m.percent for m in top) if period_total > 0 else 0.0

    return MerchantRanking(period_total=period_total, top=top, remainder_percent=remainder)


def _dominant(totals: Sequence[Tuple[object, int]]):
    """Key of the largest bucket, first one on ties, None when nothing was spent"""
    best_key, best_total = None, 0
    for key, total in totals:
        if total > best_total:
            best_key, best_total = key, total
    return best_key


def weekday_index(txn: Transaction) -> int:
    """0 = Sunday .. 6 = Saturday"""
    return (txn.date.weekday() + 1) % 7


def spending_by_weekday(transactions: Sequence[Transaction], period: Period) -> WeekdayBreakdown:
    buckets = [0] * 7
    for txn in filter_expenses(transactions, period):
        buckets[weekday_index(txn)] += abs(txn.amount)

    days = [WeekdayTotal(weekday=i, total=total) for i, total in enumerate(buckets)]
    return WeekdayBreakdown(days=days, dominant_weekday=_dominant(list(enumerate(buckets))))


def hour_slot(hour: int) -> str:
    """Named time-of-day slot for a local hour"""
    for name, start, end in HOUR_SLOTS:
        if start > end:
            if hour >= start or hour < end:
                return name
        elif start <= hour < end:
            return name
    raise ValueError(f"hour out of range: {hour}")


def spending_by_hour_slot(transactions: Sequence[Transaction], period: Period) -> HourSlotBreakdown:
    totals: Dict[str, int] = {name: 0 for name, _, _ in HOUR_SLOTS}
    for txn in filter_expenses(transactions, period):
        totals[hour_slot(txn.date.hour)] += abs(txn.amount)

    slots = [
        HourSlotTotal(slot=name, start_hour=start, end_hour=end, total=totals[name])
        for name, start, end in HOUR_SLOTS
    ]
    return HourSlotBreakdown(slots=slots, dominant_slot=_dominant([(s.slot, s.total) for s in slots]))


def card_usage(
    transactions: Sequence[Transaction],
    period: Period,
    cards: Sequence[Card],
) -> List[CardUsage]:
    """
    Period usage per card.

    Performance tiers are cumulative: every tier whose threshold the used amount
    meets is achieved. The next tier is the lowest one not yet reached.
    Transactions on cards that no longer exist are not attributed to any card.
    """
    used: Dict[str, int] = defaultdict(int)
    for txn in filter_expenses(transactions, period):
        used[txn.card_id] += abs(txn.amount)

    result = []
    for card in cards:
        used_amount = used.get(card.id, 0)
        tiers = sorted(card.performance_tiers, key=lambda t: t.amount)
        achieved = [t for t in tiers if used_amount >= t.amount]
        next_tier = next((t for t in tiers if used_amount < t.amount), None)
        top_target = tiers[-1].amount if tiers else 0

        result.append(
            CardUsage(
                card_id=card.id,
                card_name=card.name,
                used_amount=used_amount,
                credit_limit=card.credit_limit,
                remaining_limit=card.credit_limit - used_amount,
                limit_percent=_percent(used_amount, card.credit_limit),
                tiers=tiers,
                achieved_tiers=achieved,
                next_tier=next_tier,
                next_tier_gap=next_tier.amount - used_amount if next_tier else None,
                performance_percent=min(_percent(used_amount, top_target), 100.0),
            )
        )

    result.sort(key=lambda u: u.limit_percent, reverse=True)
    return result


def high_value_transactions(
    transactions: Sequence[Transaction],
    period: Period,
    threshold: int = 50_000,
    limit: int = 5,
    flag_threshold: int = 300_000,
) -> List[HighValueTransaction]:
    """Largest period expenses of at least `threshold`, biggest first"""
    large = [t for t in filter_expenses(transactions, period) if abs(t.amount) >= threshold]
    large.sort(key=lambda t: t.amount)
    return [
        HighValueTransaction(transaction=t, is_flagged=abs(t.amount) >= flag_threshold)
        for t in large[:limit]
    ]


def category_comparison(
    transactions: Sequence[Transaction],
    period: Period,
    rules: Sequence[CategoryRule],
    limit: int | None = 5,
) -> List[CategoryChange]:
    """Category spend in this period against the same window one month earlier"""
    previous = preceding_window(period)
    current_totals: Dict[str, int] = defaultdict(int)
    previous_totals: Dict[str, int] = defaultdict(int)

    for txn in transactions:
        if txn.amount >= 0:
            continue
        if period.contains(txn.date):
            current_totals[classify(txn.merchant, rules).category_id] += abs(txn.amount)
        elif previous.contains(txn.date):
            previous_totals[classify(txn.merchant, rules).category_id] += abs(txn.amount)

    changes = []
    for category_id in set(current_totals) | set(previous_totals):
        current = current_totals.get(category_id, 0)
        prev = previous_totals.get(category_id, 0)
        if current == 0 and prev == 0:
            continue
        diff = current - prev
        if prev == 0:
            percent = 100.0 if current > 0 else 0.0
        else:
            percent = diff / prev * 100
        changes.append(
            CategoryChange(category_id=category_id, current=current, previous=prev, diff=diff, percent=percent)
        )

    changes.sort(key=lambda c: (-c.diff, c.category_id))
    return changes[:limit] if limit is not None else changes
