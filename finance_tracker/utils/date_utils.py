"""Date manipulation utilities"""

from datetime import date, datetime, time, timedelta
from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of shorter months"""
    return from_date + relativedelta(months=months)


def calendar_months_between(start: date, end: date) -> int:
    """Calendar months from start's month to end's month, ignoring the day"""
    return (end.year - start.year) * 12 + (end.month - start.month)


def month_key(moment: date) -> str:
    """Calendar month bucket, e.g. '2024-03'"""
    return f"{moment.year:04d}-{moment.month:02d}"


def day_in_month(year: int, month: int, day: int) -> date:
    """Day `day` counted from the first of the month; overflow rolls into the next month"""
    return date(year, month, 1) + timedelta(days=day - 1)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def to_local_naive(moment: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def as_date(moment: date | datetime) -> date:
    return moment.date() if isinstance(moment, datetime) else moment
