"""Recurring expense detection, fixed expense reporting and upcoming bill prediction"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence
from finance_tracker.domain.models import (
    AmountStats,
    FixedExpense,
    FixedExpenseReport,
    Period,
    RecurringMerchant,
    Transaction,
    UpcomingBill,
)
from finance_tracker.domain.aggregation import filter_expenses
from finance_tracker.utils.date_utils import (
    add_months,
    as_date,
    day_in_month,
    month_key,
    start_of_day,
    to_local_naive,
)

# More than this many charges per month on average is everyday spending, not a bill
FREQUENCY_THRESHOLD = 3
MIN_DISTINCT_MONTHS = 2
RECENT_MONTHS = 6


@dataclass
class _MerchantHistory:
    monthly_counts: Dict[str, int] = field(default_factory=dict)
    amounts: List[int] = field(default_factory=list)
    dates: List[datetime] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _group_expenses(transactions: Sequence[Transaction]) -> Dict[str, _MerchantHistory]:
    history: Dict[str, _MerchantHistory] = {}
    for txn in transactions:
        if txn.amount >= 0:
            continue
        record = history.setdefault(txn.merchant.strip(), _MerchantHistory())
        key = month_key(txn.date)
        record.monthly_counts[key] = record.monthly_counts.get(key, 0) + 1
        record.amounts.append(abs(txn.amount))
        record.dates.append(txn.date)
    return history


def detect_recurring(
    transactions: Sequence[Transaction],
    now: date | datetime,
    frequency_threshold: float = FREQUENCY_THRESHOLD,
    recent_months: int = RECENT_MONTHS,
) -> Dict[str, RecurringMerchant]:
    """
    Find merchants that recur across calendar months.

    A merchant is recurring when its expenses span at least two distinct months
    and it averages no more than `frequency_threshold` charges per month, which
    keeps high-frequency spending (coffee, delivery) out. A recurring merchant is
    fixed when every historical amount is identical, variable otherwise.

    Returns:
        Mapping of trimmed merchant name to its recurrence statistics
    """
    moment = to_local_naive(now) if isinstance(now, datetime) else start_of_day(now)
    recent_cutoff = add_months(moment, -recent_months)

    recurring: Dict[str, RecurringMerchant] = {}
    for merchant, record in _group_expenses(transactions).items():
        month_count = len(record.monthly_counts)
        if month_count < MIN_DISTINCT_MONTHS:
            continue

        avg_frequency = sum(record.monthly_counts.values()) / month_count
        if avg_frequency > frequency_threshold:
            continue

        amounts = record.amounts
        recurring[merchant] = RecurringMerchant(
            merchant=merchant,
            is_fixed=len(set(amounts)) == 1,
            stats=AmountStats(min=min(amounts), max=max(amounts), avg=sum(amounts) / len(amounts)),
            month_count=month_count,
            occurrence_count=len(amounts),
            recent_count=sum(1 for d in record.dates if d > recent_cutoff),
            expected_day=_round_half_up(sum(d.day for d in record.dates) / len(record.dates)),
            last_date=max(record.dates),
            monthly_counts=dict(record.monthly_counts),
        )

    return recurring


def fixed_expenses_in_period(
    transactions: Sequence[Transaction],
    period: Period,
    now: date | datetime,
    frequency_threshold: float = FREQUENCY_THRESHOLD,
    recent_months: int = RECENT_MONTHS,
    recurring: Optional[Dict[str, RecurringMerchant]] = None,
) -> FixedExpenseReport:
    """Period expenses charged by recurring merchants, oldest first"""
    if recurring is None:
        recurring = detect_recurring(transactions, now, frequency_threshold, recent_months)

    period_expenses = filter_expenses(transactions, period)
    period_total = sum(abs(t.amount) for t in period_expenses)

    items = []
    for txn in period_expenses:
        merchant = recurring.get(txn.merchant.strip())
        if merchant is None:
            continue
        items.append(
            FixedExpense(
                transaction=txn,
                is_variable=merchant.stats.min != merchant.stats.max,
                stats=merchant.stats,
            )
        )
    items.sort(key=lambda item: item.transaction.date)

    fixed_total = sum(abs(item.transaction.amount) for item in items)
    fixed_ratio = fixed_total / period_total * 100 if period_total > 0 else 0.0

    return FixedExpenseReport(
        items=items,
        period_total=period_total,
        fixed_total=fixed_total,
        fixed_ratio=fixed_ratio,
    )


def projected_bill_date(period: Period, expected_day: int) -> Optional[date]:
    """
    Place a day-of-month inside the period.

    The day is projected onto the month the period starts in and the month after;
    a day past the end of a month rolls over into the next one. Returns the first
    projection that falls inside the period, or None.
    """
    following = add_months(period.start_date, 1)
    candidates = (
        day_in_month(period.start_date.year, period.start_date.month, expected_day),
        day_in_month(following.year, following.month, expected_day),
    )
    for candidate in candidates:
        if period.contains(candidate):
            return candidate
    return None


def upcoming_bills(
    transactions: Sequence[Transaction],
    period: Period,
    today: date | datetime,
    frequency_threshold: float = FREQUENCY_THRESHOLD,
    recent_months: int = RECENT_MONTHS,
    recurring: Optional[Dict[str, RecurringMerchant]] = None,
) -> List[UpcomingBill]:
    """
    Predict recurring charges still expected in the period.

    A merchant already charged inside the period counts as paid and is left out.
    The expected day is the mean historical day of month, which is only an
    approximation for bills that straddle a month boundary (day 30 and day 1
    average to mid-month).
    """
    if recurring is None:
        recurring = detect_recurring(transactions, today, frequency_threshold, recent_months)

    paid = {t.merchant.strip() for t in filter_expenses(transactions, period)}
    reference_day = as_date(to_local_naive(today) if isinstance(today, datetime) else today)

    bills = []
    for merchant, info in recurring.items():
        target = projected_bill_date(period, info.expected_day)
        if target is None or merchant in paid:
            continue

        d_day = (target - reference_day).days
        bills.append(
            UpcomingBill(
                merchant=merchant,
                expected_date=target,
                expected_amount=info.stats.avg,
                d_day=d_day,
                is_overdue=d_day < 0,
            )
        )

    bills.sort(key=lambda bill: (bill.expected_date, bill.merchant))
    return bills
