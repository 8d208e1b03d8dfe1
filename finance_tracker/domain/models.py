"""Domain models - pure Python dataclasses representing finance records and derived views"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional


@dataclass
class Transaction:
    """Card transaction. Negative amount is an expense, positive is income."""

    id: str
    date: datetime
    merchant: str
    amount: int
    card_id: str
    description: Optional[str] = None

    @property
    def is_expense(self) -> bool:
        return self.amount < 0


@dataclass
class PerformanceTier:
    """Spending threshold on a card that unlocks a benefit"""

    amount: int
    benefit: str


@dataclass
class Card:
    """Credit card with limit, billing due day and performance tiers"""

    id: str
    name: str
    credit_limit: int
    due_day: int
    performance_tiers: List[PerformanceTier] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryRule:
    """Merchant regex rule. Position in the rule list is its priority."""

    id: str
    pattern: str
    category_id: str
    sub_category_id: Optional[str] = None
    active: bool = True


@dataclass
class Installment:
    """Installment purchase paid off monthly"""

    id: str
    start_date: date
    merchant: str
    card_id: str
    total_amount: int
    months: int


@dataclass
class Setting:
    """Budget settings singleton"""

    start_day_of_month: int = 25
    goal_spending: int = 100_000
    income: int = 200_000


@dataclass(frozen=True)
class Period:
    """Billing window [start_date, end_date)"""

    start_date: date
    end_date: date

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days

    def contains(self, moment: date | datetime) -> bool:
        day = moment.date() if isinstance(moment, datetime) else moment
        return self.start_date <= day < self.end_date


# Classification


@dataclass
class CategoryMatch:
    """Result of classifying a merchant against the rule list"""

    category_id: str
    sub_category_id: Optional[str] = None
    rule: Optional[CategoryRule] = None

    @property
    def matched(self) -> bool:
        return self.rule is not None


# Aggregations


@dataclass
class SubCategoryTotal:
    sub_category_id: Optional[str]
    total: int
    percent: float


@dataclass
class CategoryTotal:
    category_id: str
    total: int
    percent: float
    sub_categories: List[SubCategoryTotal] = field(default_factory=list)


@dataclass
class MerchantTotal:
    merchant: str
    total: int
    percent: float


@dataclass
class MerchantRanking:
    """Top merchants for a period plus the share left to everyone else"""

    period_total: int
    top: List[MerchantTotal]
    remainder_percent: float


@dataclass
class WeekdayTotal:
    weekday: int  # 0 = Sunday .. 6 = Saturday
    total: int


@dataclass
class WeekdayBreakdown:
    days: List[WeekdayTotal]
    dominant_weekday: Optional[int]


@dataclass
class HourSlotTotal:
    slot: str
    start_hour: int
    end_hour: int
    total: int


@dataclass
class HourSlotBreakdown:
    slots: List[HourSlotTotal]
    dominant_slot: Optional[str]


@dataclass
class CardUsage:
    """Period usage of one card against its limit and performance tiers"""

    card_id: str
    card_name: str
    used_amount: int
    credit_limit: int
    remaining_limit: int
    limit_percent: float
    tiers: List[PerformanceTier]
    achieved_tiers: List[PerformanceTier]
    next_tier: Optional[PerformanceTier]
    next_tier_gap: Optional[int]
    performance_percent: float


@dataclass
class HighValueTransaction:
    transaction: Transaction
    is_flagged: bool


@dataclass
class CategoryChange:
    """Category spend in the current period compared with the previous one"""

    category_id: str
    current: int
    previous: int
    diff: int
    percent: float


# Goal progress


@dataclass
class GoalProgress:
    """Pace-vs-plan metrics for the spending goal of one period"""

    goal: int
    spent: int
    total_days: int
    days_passed: int
    current_progress_percent: float
    expected_spent: float
    expected_progress_percent: float
    diff: float
    is_over_spent: bool
    is_total_over_spent: bool
    daily_budget: float
    remaining_days: int
    remaining_budget: int
    remaining_daily_budget: float
    actual_daily_average: float
    projected_total_spending: float
    projected_total_percent: float


# Recurring expenses


@dataclass
class AmountStats:
    min: int
    max: int
    avg: float


@dataclass
class RecurringMerchant:
    """Merchant that recurs across months below the frequency ceiling"""

    merchant: str
    is_fixed: bool
    stats: AmountStats
    month_count: int
    occurrence_count: int
    recent_count: int
    expected_day: int
    last_date: datetime
    monthly_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def is_variable(self) -> bool:
        return not self.is_fixed


@dataclass
class FixedExpense:
    transaction: Transaction
    is_variable: bool
    stats: AmountStats


@dataclass
class FixedExpenseReport:
    items: List[FixedExpense]
    period_total: int
    fixed_total: int
    fixed_ratio: float


@dataclass
class UpcomingBill:
    merchant: str
    expected_date: date
    expected_amount: float
    d_day: int
    is_overdue: bool


# Installments


@dataclass
class InstallmentStatus:
    """Amortization state of one installment at a point in time"""

    installment: Installment
    months_passed: int
    current_round: int
    is_finished: bool
    monthly_amount: int
    paid_amount: int
    remaining_amount: int
    progress_percent: float
    end_date: date
    card_name: Optional[str] = None


@dataclass
class InstallmentSummary:
    active: List[InstallmentStatus]
    total_remaining: int
    total_monthly: int
