"""/v1/transactions - record and list card transactions"""

import logging
import uuid
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import BulkCreateResponse, MessageResponse, TransactionCreate
from finance_tracker.api.dependencies import get_request_id
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import TransactionRepository
from finance_tracker.domain.models import Transaction
from finance_tracker.domain.validation import validate_record
from finance_tracker.domain.exceptions import RecordNotFoundError, RecordValidationError

router = APIRouter()


def _new_transaction(body: TransactionCreate) -> Transaction:
    return validate_record("transaction", {**body.model_dump(), "id": str(uuid.uuid4())}).unwrap()


@router.get("/transactions", response_model=List[Transaction])
def list_transactions(db: Session = Depends(get_db)):
    return TransactionRepository(db).load_all()


@router.post("/transactions", response_model=Transaction, status_code=201)
def create_transaction(body: TransactionCreate, request: Request, db: Session = Depends(get_db)):
    """Append one transaction to the stored list"""
    try:
        txn = _new_transaction(body)
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    TransactionRepository(db).append(txn)
    db.commit()

    logging.info("Transaction recorded", extra={"request_id": get_request_id(request), "transaction_id": txn.id})
    return txn


@router.post("/transactions/bulk", response_model=BulkCreateResponse, status_code=201)
def create_transactions_bulk(body: List[TransactionCreate], db: Session = Depends(get_db)):
    """
    Append many transactions at once (spreadsheet import).

    Every row is validated before anything is written; one bad row rejects the batch.
    """
    try:
        new_transactions = [_new_transaction(item) for item in body]
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    TransactionRepository(db).extend(new_transactions)
    db.commit()

    count = len(new_transactions)
    return BulkCreateResponse(message=f"{count} transactions added successfully", count=count)


@router.delete("/transactions/{transaction_id}", response_model=MessageResponse)
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    try:
        TransactionRepository(db).remove(transaction_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Transaction deleted")
