"""Dependency injection for FastAPI endpoints"""

from datetime import date, datetime
from typing import Optional
from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import SettingRepository
from finance_tracker.domain.models import Period
from finance_tracker.domain.periods import shift_period

# 100 years either way
MAX_PERIOD_OFFSET = 1200


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_now() -> datetime:
    """Current local time; overridden in tests to pin the clock"""
    return datetime.now()


def get_period(
    reference_date: Optional[date] = Query(None, description="Any date inside the wanted period (default today)"),
    offset: int = Query(
        0,
        ge=-MAX_PERIOD_OFFSET,
        le=MAX_PERIOD_OFFSET,
        description="Periods to move from the reference period, e.g. -1 for the previous one",
    ),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
) -> Period:
    """Billing period for the request, anchored on the stored start day of month"""
    setting = SettingRepository(db).load()
    try:
        return shift_period(reference_date or now.date(), setting.start_day_of_month, offset)
    except (ValueError, OverflowError) as e:
        # Period bounds fall outside the supported date range (year 1..9999)
        raise HTTPException(status_code=422, detail=f"Period out of range: {e}")
