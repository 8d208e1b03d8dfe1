"""Record validation - pydantic schemas for stored and submitted records"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from finance_tracker.domain.models import Card, CategoryRule, Installment, PerformanceTier, Setting, Transaction
from finance_tracker.domain.exceptions import RecordValidationError
from finance_tracker.utils.date_utils import to_local_naive

T = TypeVar("T")


def reject_bool(value: Any) -> Any:
    """Booleans are ints to pydantic's lax mode; an amount of `true` is an input error"""
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


Amount = Annotated[int, BeforeValidator(reject_bool)]


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

    domain_type: ClassVar[Optional[type]] = None

    def to_domain(self):
        return self.domain_type(**self.model_dump())


class TransactionRecord(_Record):
    domain_type = Transaction

    id: str = Field(..., min_length=1)
    date: datetime
    merchant: str = Field(..., max_length=100)
    amount: Amount
    card_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=255)

    @field_validator("date")
    @classmethod
    def _local_time(cls, value: datetime) -> datetime:
        return to_local_naive(value)


class PerformanceTierRecord(BaseModel):
    amount: Amount = Field(..., ge=0)
    benefit: str


class CardRecord(_Record):
    domain_type = Card

    id: str = Field(..., min_length=1)
    name: str = Field(..., max_length=100)
    credit_limit: Amount = Field(..., ge=0)
    due_day: int = Field(..., ge=1, le=31)
    performance_tiers: List[PerformanceTierRecord] = Field(default_factory=list)

    def to_domain(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            credit_limit=self.credit_limit,
            due_day=self.due_day,
            performance_tiers=[PerformanceTier(amount=t.amount, benefit=t.benefit) for t in self.performance_tiers],
        )


class CategoryRuleRecord(_Record):
    domain_type = CategoryRule

    id: str = Field(..., min_length=1)
    pattern: str
    category_id: str = Field(..., min_length=1)
    sub_category_id: Optional[str] = None
    active: bool = True


class InstallmentRecord(_Record):
    domain_type = Installment

    id: str = Field(..., min_length=1)
    start_date: date
    merchant: str = Field(..., max_length=100)
    card_id: str = Field(..., min_length=1)
    total_amount: Amount = Field(..., ge=0)
    months: int = Field(..., ge=2)


class SettingRecord(_Record):
    domain_type = Setting

    start_day_of_month: int = Field(25, ge=1, le=28)
    goal_spending: Amount = Field(100_000, ge=0)
    income: Amount = Field(200_000, ge=0)


RECORD_SCHEMAS: Dict[str, Type[_Record]] = {
    "transaction": TransactionRecord,
    "card": CardRecord,
    "category_rule": CategoryRuleRecord,
    "installment": InstallmentRecord,
    "setting": SettingRecord,
}


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating one raw record: the domain object or field-level errors"""

    kind: str
    value: Optional[T] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        if self.errors:
            raise RecordValidationError(self.kind, self.errors)
        return self.value


def _field_errors(error: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for item in error.errors():
        name = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(name, []).append(item["msg"])
    return errors


def validate_record(kind: str, raw: Any) -> ValidationResult:
    """
    Validate a raw JSON document as a record of `kind`.

    Defaults (settings, rule `active`, card tiers) are applied here, at
    construction. Invalid amounts or dates are reported, never replaced.
    """
    schema = RECORD_SCHEMAS[kind]
    try:
        record = schema.model_validate(raw)
    except ValidationError as e:
        return ValidationResult(kind=kind, errors=_field_errors(e))
    return ValidationResult(kind=kind, value=record.to_domain())


def serialize_record(obj: Any) -> Dict[str, Any]:
    """JSON-ready document for a domain record"""
    data = asdict(obj)
    for key, value in data.items():
        if isinstance(value, (date, datetime)):
            data[key] = value.isoformat()
    return data
