"""/v1/category-rules - ordered merchant classification rules

Rule order is priority, so the list is always replaced as a whole; there is no
per-rule update.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import (
    CategoryRuleCreate,
    CategoryRuleSchema,
    MessageResponse,
    SimulationRequest,
    SimulationResponse,
)
from finance_tracker.api.dependencies import get_request_id
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import CategoryRuleRepository
from finance_tracker.domain.models import CategoryRule
from finance_tracker.domain.categorization import add_rule, classify, remove_rule, validate_pattern
from finance_tracker.domain.exceptions import InvalidRulePatternError

router = APIRouter()


@router.get("/category-rules", response_model=List[CategoryRule])
def list_rules(db: Session = Depends(get_db)):
    return CategoryRuleRepository(db).load_all()


@router.put("/category-rules", response_model=List[CategoryRule])
def replace_rules(body: List[CategoryRuleSchema], request: Request, db: Session = Depends(get_db)):
    """Replace the whole rule list. Every pattern must compile."""
    invalid = {}
    for item in body:
        try:
            validate_pattern(item.pattern)
        except InvalidRulePatternError as e:
            invalid[item.id] = e.reason
    if invalid:
        raise HTTPException(status_code=422, detail={"invalid_patterns": invalid})

    rules = [CategoryRule(**item.model_dump()) for item in body]
    CategoryRuleRepository(db).save_all(rules)
    db.commit()

    logging.info("Category rules replaced", extra={"request_id": get_request_id(request), "rule_count": len(rules)})
    return rules


@router.post("/category-rules", response_model=List[CategoryRule], status_code=201)
def create_rule(body: CategoryRuleCreate, db: Session = Depends(get_db)):
    """Add a rule at the top of the list (highest priority)"""
    repo = CategoryRuleRepository(db)
    try:
        rules = add_rule(repo.load_all(), body.pattern, body.category_id, body.sub_category_id)
    except InvalidRulePatternError as e:
        raise HTTPException(status_code=422, detail=str(e))

    repo.save_all(rules)
    db.commit()
    return rules


@router.delete("/category-rules/{rule_id}", response_model=MessageResponse)
def delete_rule(rule_id: str, db: Session = Depends(get_db)):
    repo = CategoryRuleRepository(db)
    rules = repo.load_all()
    remaining = remove_rule(rules, rule_id)
    if len(remaining) == len(rules):
        raise HTTPException(status_code=404, detail=f"No category_rule with id {rule_id}")

    repo.save_all(remaining)
    db.commit()
    return MessageResponse(message="Rule deleted")


@router.post("/category-rules/simulate", response_model=SimulationResponse)
def simulate_rules(body: SimulationRequest, db: Session = Depends(get_db)):
    """Show which stored rule would classify a merchant"""
    match = classify(body.merchant, CategoryRuleRepository(db).load_all())
    return SimulationResponse(
        matched=match.matched,
        category_id=match.category_id,
        sub_category_id=match.sub_category_id,
        rule_id=match.rule.id if match.rule else None,
        pattern=match.rule.pattern if match.rule else None,
    )
