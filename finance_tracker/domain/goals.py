"""Spending goal progress - pace against plan and month-end projection"""

from datetime import date, datetime
from typing import Sequence
from finance_tracker.domain.models import GoalProgress, Period, Setting, Transaction
from finance_tracker.domain.aggregation import total_expense
from finance_tracker.utils.date_utils import start_of_day, to_local_naive


def days_passed_in(period: Period, now: date | datetime) -> int:
    """
    Elapsed days of the period at `now`, counting the current day as elapsed.

    A finished period counts in full, a future one as zero.
    """
    moment = to_local_naive(now) if isinstance(now, datetime) else start_of_day(now)
    start = start_of_day(period.start_date)
    end = start_of_day(period.end_date)

    if moment >= end:
        return period.total_days
    if moment < start:
        return 0
    return (moment - start).days + 1


def compute_progress(
    period: Period,
    goal_spending: int,
    period_expense_sum: int,
    now: date | datetime,
) -> GoalProgress:
    """
    Derive pace-vs-plan metrics for one period.

    Every ratio whose denominator can legitimately be zero (goal, period length,
    elapsed days) resolves to 0 instead of raising.
    """
    total_days = period.total_days
    days_passed = days_passed_in(period, now)
    spent = period_expense_sum

    current_progress_percent = spent / goal_spending * 100 if goal_spending else 0.0

    daily_budget = goal_spending / total_days if total_days else 0.0
    expected_spent = daily_budget * days_passed
    expected_progress_percent = days_passed / total_days * 100 if total_days else 0.0

    diff = spent - expected_spent

    remaining_days = max(1, total_days - days_passed)
    remaining_budget = goal_spending - spent
    remaining_daily_budget = remaining_budget / remaining_days

    actual_daily_average = spent / days_passed if days_passed > 0 else 0.0
    projected_total_spending = actual_daily_average * total_days
    projected_total_percent = projected_total_spending / goal_spending * 100 if goal_spending else 0.0

    return GoalProgress(
        goal=goal_spending,
        spent=spent,
        total_days=total_days,
        days_passed=days_passed,
        current_progress_percent=current_progress_percent,
        expected_spent=expected_spent,
        expected_progress_percent=expected_progress_percent,
        diff=diff,
        is_over_spent=diff > 0,
        is_total_over_spent=spent > goal_spending,
        daily_budget=daily_budget,
        remaining_days=remaining_days,
        remaining_budget=remaining_budget,
        remaining_daily_budget=remaining_daily_budget,
        actual_daily_average=actual_daily_average,
        projected_total_spending=projected_total_spending,
        projected_total_percent=projected_total_percent,
    )


def goal_progress_for(
    transactions: Sequence[Transaction],
    period: Period,
    setting: Setting,
    now: date | datetime,
) -> GoalProgress:
    """Main entry point: sum the period's expenses and compute progress against the goal"""
    return compute_progress(period, setting.goal_spending, total_expense(transactions, period), now)
