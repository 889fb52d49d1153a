"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ledger_analytics.domain.models import Goal, GoalDescriptor, Transaction


class TransactionIn(BaseModel):
    """
    Ledger entry as sent by the caller.

    Deliberately loose: malformed values must reach the normalizer and be
    reported in `skipped` instead of failing the whole request with 422.
    """

    id: Any = None
    kind: Any = Field(None, validation_alias=AliasChoices("kind", "type"))
    category: Any = None
    value: Any = None
    occurred_at: Any = Field(None, validation_alias=AliasChoices("occurred_at", "occurredAt", "date"))
    organization_id: Any = Field(None, validation_alias=AliasChoices("organization_id", "organizationId"))
    description: Any = None
    payment_method: Any = Field(None, validation_alias=AliasChoices("payment_method", "paymentMethod"))
    tags: Any = None

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            kind=self.kind,
            category=self.category,
            value=self.value,
            occurred_at=self.occurred_at,
            organization_id=self.organization_id,
            description=self.description,
            payment_method=self.payment_method,
            tags=self.tags,
        )


class GoalIn(BaseModel):
    """Savings goal; negative amounts are rejected by the engine with 422"""

    target_amount: Decimal
    current_amount: Decimal = Decimal("0")

    def to_domain(self) -> GoalDescriptor:
        return GoalDescriptor(target_amount=self.target_amount, current_amount=self.current_amount)


class GoalRecordIn(BaseModel):
    """Single goal record as kept by the goal store"""

    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    target_date: Optional[date] = None
    category: Optional[str] = None

    def to_domain(self, organization_id: Optional[str] = None) -> Goal:
        return Goal(
            id=self.id,
            name=self.name,
            target_amount=self.target_amount,
            current_amount=self.current_amount,
            target_date=self.target_date,
            organization_id=organization_id,
            category=self.category,
        )


class SnapshotRequest(BaseModel):
    """Request body for POST /v1/analytics/snapshot and /v1/reports/*"""

    organization_id: Optional[str] = None
    # Rows that are not objects are kept raw and reported as malformed
    transactions: List[Annotated[Union[TransactionIn, Any], Field(union_mode="left_to_right")]] = Field(
        default_factory=list
    )
    goal: Optional[GoalIn] = None
    goals: List[GoalRecordIn] = Field(
        default_factory=list, description="Goal records folded into one goal when `goal` is absent"
    )
    category_subtypes: Dict[str, str] = Field(
        default_factory=dict, description="Expense category -> regular | goal | investment | debt"
    )
    monthly_window: Optional[int] = Field(None, description="Trailing months in the trend series")
    heatmap_top_k: Optional[int] = Field(None, description="Named columns in the weekly heatmap")

    def ledger_entries(self) -> List[Any]:
        return [txn.to_domain() if isinstance(txn, TransactionIn) else txn for txn in self.transactions]


class DomainSchema(BaseModel):
    """Base for responses built straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


class SummarySchema(DomainSchema):
    balance: float
    income: float
    expenses: float
    savings_goal: Optional[float] = None
    savings_progress: Optional[float] = None


class MonthlySchema(DomainSchema):
    month_key: str
    label: str
    income: float
    expenses: float


class CategorySchema(DomainSchema):
    name: str
    amount: float
    color: str
    percentage: float


class MoneyFlowNodeSchema(DomainSchema):
    id: str
    name: str
    column: str
    value: float
    subtype: Optional[str] = None


class MoneyFlowLinkSchema(DomainSchema):
    source_id: str
    target_id: str
    value: float


class MoneyFlowSchema(DomainSchema):
    nodes: List[MoneyFlowNodeSchema]
    links: List[MoneyFlowLinkSchema]


class HeatmapSchema(DomainSchema):
    categories: List[str]
    weekdays: List[str]
    matrix: List[List[float]]


class DailyTransactionSchema(DomainSchema):
    category: str
    amount: float
    description: str


class RecentTransactionSchema(DomainSchema):
    id: Union[int, str]
    kind: str
    category: str
    value: float
    occurred_at: datetime
    description: str


class SkippedEntrySchema(DomainSchema):
    id: Any = None
    reason: str
    detail: str = ""


class SnapshotResponse(DomainSchema):
    """Response for POST /v1/analytics/snapshot"""

    summary: SummarySchema
    monthly: List[MonthlySchema]
    categories: List[CategorySchema]
    money_flow: MoneyFlowSchema
    heatmap: HeatmapSchema
    daily_transactions: Dict[str, List[DailyTransactionSchema]]
    recent_transactions: List[RecentTransactionSchema]
    skipped: List[SkippedEntrySchema]


class GoalsRequest(BaseModel):
    """Request body for POST /v1/reports/goals"""

    organization_id: Optional[str] = None
    goals: List[GoalRecordIn] = Field(default_factory=list)
    today: Optional[date] = Field(None, description="Reference date, defaults to the server's today")


class GoalProgressSchema(BaseModel):
    id: str
    name: str
    target_amount: float
    current_amount: float
    progress: float
    days_remaining: Optional[int] = None
    monthly_required: Optional[float] = None


class GoalsResponse(BaseModel):
    """Per-goal progress plus the combined goal fed to the summary"""

    goals: List[GoalProgressSchema]
    combined_target: Optional[float] = None
    combined_current: Optional[float] = None
    combined_progress: Optional[float] = None
