"""GET /v1/analytics/* - derived spending views for one billing period

Every view loads a fresh snapshot of the stored records and computes from it;
nothing is cached between requests.
"""

import time
from datetime import datetime
from typing import List, Sequence
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from finance_tracker.api.dependencies import get_now, get_period, get_request_id
from finance_tracker.config import settings
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import (
    CardRepository,
    CategoryRuleRepository,
    InstallmentRepository,
    SettingRepository,
    TransactionRepository,
)
from finance_tracker.infrastructure.observability.logging import log_analytics
from finance_tracker.infrastructure.observability.metrics import (
    analytics_request_counter,
    invalid_rule_counter,
    record_classification,
)
from finance_tracker.domain.models import (
    CardUsage,
    CategoryChange,
    CategoryRule,
    CategoryTotal,
    FixedExpenseReport,
    GoalProgress,
    HighValueTransaction,
    HourSlotBreakdown,
    InstallmentSummary,
    MerchantRanking,
    Period,
    UpcomingBill,
    WeekdayBreakdown,
)
from finance_tracker.domain import aggregation
from finance_tracker.domain.categorization import classify, invalid_rules
from finance_tracker.domain.goals import goal_progress_for
from finance_tracker.domain.installments import summarize_installments
from finance_tracker.domain.recurring import fixed_expenses_in_period, upcoming_bills

router = APIRouter(prefix="/analytics")


def _observe(view: str, request: Request, period: Period, records: Sequence, started: float) -> None:
    analytics_request_counter.labels(view=view).inc()
    duration_ms = (time.time() - started) * 1000
    log_analytics(get_request_id(request), view, period, len(records), duration_ms)


def _load_rules(db: Session) -> List[CategoryRule]:
    rules = CategoryRuleRepository(db).load_all()
    skipped = len(invalid_rules(rules))
    if skipped:
        invalid_rule_counter.inc(skipped)
    return rules


@router.get("/period", response_model=Period)
def get_current_period(period: Period = Depends(get_period)):
    """Resolved billing window for the reference date and offset"""
    return period


@router.get("/goal-progress", response_model=GoalProgress)
def get_goal_progress(
    request: Request,
    period: Period = Depends(get_period),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    started = time.time()
    transactions = TransactionRepository(db).load_all()
    setting = SettingRepository(db).load()

    progress = goal_progress_for(transactions, period, setting, now)
    _observe("goal_progress", request, period, transactions, started)
    return progress


@router.get("/categories", response_model=List[CategoryTotal])
def get_category_breakdown(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()
    rules = _load_rules(db)

    breakdown = aggregation.spending_by_category(transactions, period, rules)

    expenses = aggregation.filter_expenses(transactions, period)
    matched = sum(1 for t in expenses if classify(t.merchant, rules).matched)
    record_classification(matched, len(expenses) - matched)

    _observe("categories", request, period, transactions, started)
    return breakdown


@router.get("/category-comparison", response_model=List[CategoryChange])
def get_category_comparison(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()
    rules = _load_rules(db)

    changes = aggregation.category_comparison(
        transactions, period, rules, limit=settings.category_comparison_limit
    )
    _observe("category_comparison", request, period, transactions, started)
    return changes


@router.get("/merchants", response_model=MerchantRanking)
def get_top_merchants(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    ranking = aggregation.spending_by_merchant(transactions, period, limit=settings.top_merchants_limit)
    _observe("merchants", request, period, transactions, started)
    return ranking


@router.get("/weekdays", response_model=WeekdayBreakdown)
def get_weekday_pattern(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    breakdown = aggregation.spending_by_weekday(transactions, period)
    _observe("weekdays", request, period, transactions, started)
    return breakdown


@router.get("/hours", response_model=HourSlotBreakdown)
def get_hourly_pattern(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    breakdown = aggregation.spending_by_hour_slot(transactions, period)
    _observe("hours", request, period, transactions, started)
    return breakdown


@router.get("/cards", response_model=List[CardUsage])
def get_card_usage(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()
    cards = CardRepository(db).load_all()

    usage = aggregation.card_usage(transactions, period, cards)
    _observe("cards", request, period, transactions, started)
    return usage


@router.get("/high-value", response_model=List[HighValueTransaction])
def get_high_value_transactions(request: Request, period: Period = Depends(get_period), db: Session = Depends(get_db)):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    items = aggregation.high_value_transactions(
        transactions,
        period,
        threshold=settings.high_value_threshold,
        limit=settings.high_value_limit,
        flag_threshold=settings.high_value_flag_threshold,
    )
    _observe("high_value", request, period, transactions, started)
    return items


@router.get("/fixed-expenses", response_model=FixedExpenseReport)
def get_fixed_expenses(
    request: Request,
    period: Period = Depends(get_period),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    report = fixed_expenses_in_period(
        transactions,
        period,
        now,
        frequency_threshold=settings.recurring_frequency_threshold,
        recent_months=settings.recurring_recent_months,
    )
    _observe("fixed_expenses", request, period, transactions, started)
    return report


@router.get("/upcoming-bills", response_model=List[UpcomingBill])
def get_upcoming_bills(
    request: Request,
    period: Period = Depends(get_period),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    started = time.time()
    transactions = TransactionRepository(db).load_all()

    bills = upcoming_bills(
        transactions,
        period,
        now,
        frequency_threshold=settings.recurring_frequency_threshold,
        recent_months=settings.recurring_recent_months,
    )
    _observe("upcoming_bills", request, period, transactions, started)
    return bills


@router.get("/installments", response_model=InstallmentSummary)
def get_installment_summary(
    request: Request,
    period: Period = Depends(get_period),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """Active installments; finished ones stay stored but are left out here"""
    started = time.time()
    installments = InstallmentRepository(db).load_all()
    cards = CardRepository(db).load_all()

    summary = summarize_installments(installments, cards, now)
    _observe("installments", request, period, installments, started)
    return summary
