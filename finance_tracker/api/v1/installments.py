"""/v1/installments - installment purchases"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import InstallmentCreate, MessageResponse
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import InstallmentRepository
from finance_tracker.domain.models import Installment
from finance_tracker.domain.validation import validate_record
from finance_tracker.domain.exceptions import RecordNotFoundError, RecordValidationError

router = APIRouter()


@router.get("/installments", response_model=List[Installment])
def list_installments(db: Session = Depends(get_db)):
    return InstallmentRepository(db).load_all()


@router.post("/installments", response_model=Installment, status_code=201)
def create_installment(body: InstallmentCreate, db: Session = Depends(get_db)):
    try:
        installment = validate_record("installment", {**body.model_dump(), "id": str(uuid.uuid4())}).unwrap()
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    InstallmentRepository(db).append(installment)
    db.commit()
    return installment


@router.delete("/installments/{installment_id}", response_model=MessageResponse)
def delete_installment(installment_id: str, db: Session = Depends(get_db)):
    try:
        InstallmentRepository(db).remove(installment_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Installment deleted")
