"""/v1/settings - billing period start day, spending goal and income"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import SettingSchema
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import SettingRepository
from finance_tracker.domain.models import Setting
from finance_tracker.domain.validation import validate_record
from finance_tracker.domain.exceptions import RecordValidationError

router = APIRouter()


@router.get("/settings", response_model=Setting)
def get_settings(db: Session = Depends(get_db)):
    """Stored settings, or the defaults when nothing was saved yet"""
    return SettingRepository(db).load()


@router.put("/settings", response_model=Setting)
def update_settings(body: SettingSchema, db: Session = Depends(get_db)):
    try:
        setting = validate_record("setting", body.model_dump()).unwrap()
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    SettingRepository(db).save(setting)
    db.commit()
    return setting
