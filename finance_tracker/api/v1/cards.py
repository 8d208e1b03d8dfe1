"""/v1/cards - credit cards with limits and performance tiers"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import CardCreate, MessageResponse
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import CardRepository
from finance_tracker.domain.models import Card
from finance_tracker.domain.validation import validate_record
from finance_tracker.domain.exceptions import RecordNotFoundError, RecordValidationError

router = APIRouter()


@router.get("/cards", response_model=List[Card])
def list_cards(db: Session = Depends(get_db)):
    return CardRepository(db).load_all()


@router.post("/cards", response_model=Card, status_code=201)
def create_card(body: CardCreate, db: Session = Depends(get_db)):
    try:
        card = validate_record("card", {**body.model_dump(), "id": str(uuid.uuid4())}).unwrap()
    except RecordValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    CardRepository(db).append(card)
    db.commit()
    return card


@router.delete("/cards/{card_id}", response_model=MessageResponse)
def delete_card(card_id: str, db: Session = Depends(get_db)):
    """
    Delete a card. Transactions and installments keep referencing it and show
    as belonging to an unknown card.
    """
    try:
        CardRepository(db).remove(card_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    db.commit()
    return MessageResponse(message="Card deleted")
