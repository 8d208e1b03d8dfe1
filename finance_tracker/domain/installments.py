"""Installment amortization - current round, paid and remaining principal"""

from datetime import date, datetime
from typing import List, Optional, Sequence
from finance_tracker.domain.models import Card, Installment, InstallmentStatus, InstallmentSummary
from finance_tracker.utils.date_utils import add_months, as_date, calendar_months_between

UNKNOWN_CARD = "Unknown Card"


def amortize(installment: Installment, now: date | datetime, card_name: Optional[str] = None) -> InstallmentStatus:
    """
    Compute where an installment stands at `now`.

    The start month is round 1; a new round begins each month once the day of
    month reaches the start day. The monthly amount is floor(total / months) and
    the last round absorbs no remainder, so monthly * months can fall short of
    the total by up to months - 1.

    Example:
        1,200,000 over 12 months from 2024-01-15, at 2024-04-20
        -> round 4, monthly 100,000, paid 400,000, remaining 800,000, 33.33%
    """
    today = as_date(now)
    start = installment.start_date

    months_passed = calendar_months_between(start, today) + (1 if today.day >= start.day else 0)
    months_passed = max(months_passed, 1)

    current_round = min(months_passed, installment.months)
    monthly_amount = installment.total_amount // installment.months
    paid_amount = monthly_amount * current_round

    return InstallmentStatus(
        installment=installment,
        months_passed=months_passed,
        current_round=current_round,
        is_finished=months_passed > installment.months,
        monthly_amount=monthly_amount,
        paid_amount=paid_amount,
        remaining_amount=installment.total_amount - paid_amount,
        progress_percent=round(current_round / installment.months * 100, 2),
        end_date=add_months(start, installment.months),
        card_name=card_name,
    )


def summarize_installments(
    installments: Sequence[Installment],
    cards: Sequence[Card],
    now: date | datetime,
) -> InstallmentSummary:
    """Active (unfinished) installments with card names and running totals"""
    card_names = {card.id: card.name for card in cards}

    active: List[InstallmentStatus] = []
    for inst in installments:
        status = amortize(inst, now, card_name=card_names.get(inst.card_id, UNKNOWN_CARD))
        if not status.is_finished:
            active.append(status)

    return InstallmentSummary(
        active=active,
        total_remaining=sum(s.remaining_amount for s in active),
        total_monthly=sum(s.monthly_amount for s in active),
    )
