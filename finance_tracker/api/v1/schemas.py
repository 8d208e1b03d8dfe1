"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from finance_tracker.domain.validation import Amount


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    date: datetime
    merchant: str = Field(..., max_length=100, description="Merchant name as printed on the statement")
    amount: Amount = Field(..., description="Negative for expenses, positive for income")
    card_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=255)


class BulkCreateResponse(BaseModel):
    """Response for POST /v1/transactions/bulk"""

    message: str
    count: int


class PerformanceTierSchema(BaseModel):
    amount: Amount = Field(..., ge=0)
    benefit: str


class CardCreate(BaseModel):
    """Request body for POST /v1/cards"""

    name: str = Field(..., min_length=1, max_length=100)
    credit_limit: Amount = Field(..., ge=0)
    due_day: int = Field(..., ge=1, le=31)
    performance_tiers: List[PerformanceTierSchema] = Field(default_factory=list)


class CategoryRuleSchema(BaseModel):
    """Single rule in PUT /v1/category-rules; list order is priority"""

    id: str = Field(..., min_length=1)
    pattern: str
    category_id: str = Field(..., min_length=1)
    sub_category_id: Optional[str] = None
    active: bool = True


class CategoryRuleCreate(BaseModel):
    """Request body for POST /v1/category-rules"""

    pattern: str = Field(..., min_length=1, description="Case-insensitive regular expression")
    category_id: str = Field(..., min_length=1)
    sub_category_id: Optional[str] = None


class SimulationRequest(BaseModel):
    """Request body for POST /v1/category-rules/simulate"""

    merchant: str


class SimulationResponse(BaseModel):
    """Which rule, if any, would classify the merchant"""

    matched: bool
    category_id: str
    sub_category_id: Optional[str] = None
    rule_id: Optional[str] = None
    pattern: Optional[str] = None


class InstallmentCreate(BaseModel):
    """Request body for POST /v1/installments"""

    start_date: date
    merchant: str = Field(..., max_length=100)
    card_id: str = Field(..., min_length=1)
    total_amount: Amount = Field(..., ge=0)
    months: int = Field(..., ge=2)


class SettingSchema(BaseModel):
    """Request body for PUT /v1/settings"""

    start_day_of_month: int = Field(25, ge=1, le=28)
    goal_spending: Amount = Field(100_000, ge=0)
    income: Amount = Field(200_000, ge=0)


class MessageResponse(BaseModel):
    message: str
