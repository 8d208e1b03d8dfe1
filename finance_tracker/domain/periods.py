"""Billing period resolution anchored on a configured start day of month"""

from datetime import date, datetime
from finance_tracker.domain.models import Period
from finance_tracker.utils.date_utils import add_months, as_date

MIN_START_DAY = 1
MAX_START_DAY = 28  # every month has a day 28, so no clamping is needed


def resolve_period(reference_date: date | datetime, start_day_of_month: int) -> Period:
    """
    Compute the billing window containing reference_date.

    When the reference day falls before the start day, the window began in the
    previous month. The end date is the next window's start (exclusive).

    Example:
        reference 2024-03-10, start day 25 -> [2024-02-25, 2024-03-25)
        reference 2024-03-25, start day 25 -> [2024-03-25, 2024-04-25)
    """
    if not MIN_START_DAY <= start_day_of_month <= MAX_START_DAY:
        raise ValueError(
            f"start_day_of_month must be between {MIN_START_DAY} and {MAX_START_DAY}, got {start_day_of_month}"
        )

    reference = as_date(reference_date)
    base = reference if reference.day >= start_day_of_month else add_months(reference, -1)

    start_date = date(base.year, base.month, start_day_of_month)
    end_date = add_months(start_date, 1)
    return Period(start_date=start_date, end_date=end_date)


def shift_period(reference_date: date | datetime, start_day_of_month: int, offset: int) -> Period:
    """Resolve the period `offset` billing cycles away from the one containing reference_date"""
    return resolve_period(add_months(as_date(reference_date), offset), start_day_of_month)


def previous_period(reference_date: date | datetime, start_day_of_month: int) -> Period:
    return shift_period(reference_date, start_day_of_month, -1)


def next_period(reference_date: date | datetime, start_day_of_month: int) -> Period:
    return shift_period(reference_date, start_day_of_month, 1)


def preceding_window(period: Period) -> Period:
    """Same window moved back one month, used for period-over-period comparison"""
    return Period(
        start_date=add_months(period.start_date, -1),
        end_date=add_months(period.end_date, -1),
    )
