"""Domain models - pure Python dataclasses representing ledger entries and derived views"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_KINDS = (INCOME, EXPENSE)

# Money-flow columns
COLUMN_INCOME = "income"
COLUMN_BALANCE = "balance"
COLUMN_EXPENSE = "expense"

# Expense subtypes a caller may assign; "unallocated" and "deficit" are reserved
# for synthetic nodes
SUBTYPE_REGULAR = "regular"
SUBTYPE_GOAL = "goal"
SUBTYPE_INVESTMENT = "investment"
SUBTYPE_DEBT = "debt"
SUBTYPE_UNALLOCATED = "unallocated"
SUBTYPE_DEFICIT = "deficit"
CALLER_SUBTYPES = (SUBTYPE_REGULAR, SUBTYPE_GOAL, SUBTYPE_INVESTMENT, SUBTYPE_DEBT)

ZERO = Decimal("0")
DEFAULT_CATEGORY = "Outros"


@dataclass
class Transaction:
    """Raw ledger entry as supplied by the ledger store (not yet validated)"""

    id: Any
    kind: Any  # "income" or "expense"
    category: Any
    value: Any
    occurred_at: Any
    organization_id: Any = None
    description: Any = ""
    payment_method: Any = None
    tags: Any = ()


@dataclass(frozen=True)
class NormalizedTransaction:
    """Validated ledger entry; the only shape downstream builders ever see"""

    id: Any
    kind: str
    category: str
    value: Decimal
    occurred_at: datetime
    organization_id: Optional[str] = None
    description: str = ""
    payment_method: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @property
    def is_income(self) -> bool:
        return self.kind == INCOME

    @property
    def is_expense(self) -> bool:
        return self.kind == EXPENSE


@dataclass(frozen=True)
class SkippedEntry:
    """Entry dropped by the normalizer, with a stable reason code"""

    id: Any
    reason: str
    detail: str = ""


@dataclass(frozen=True)
class NormalizationResult:
    entries: Tuple[NormalizedTransaction, ...]
    skipped: Tuple[SkippedEntry, ...]


@dataclass(frozen=True)
class GoalDescriptor:
    """Savings goal supplied by the goal store"""

    target_amount: Decimal
    current_amount: Decimal


@dataclass(frozen=True)
class Goal:
    """Single savings goal record from the goal store"""

    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = ZERO
    target_date: Optional[date] = None
    organization_id: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class FinancialSummary:
    """Top-line totals; goal fields are None when no goal applies"""

    balance: Decimal
    income: Decimal
    expenses: Decimal
    savings_goal: Optional[Decimal] = None
    savings_progress: Optional[Decimal] = None


@dataclass(frozen=True)
class MonthlyBucket:
    month_key: str  # YYYY-MM
    label: str
    income: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class ExpenseCategory:
    name: str
    amount: Decimal
    color: str
    percentage: Decimal


@dataclass(frozen=True)
class MoneyFlowNode:
    id: str
    name: str
    column: str  # income | balance | expense
    value: Decimal
    subtype: Optional[str] = None

    @property
    def is_synthetic(self) -> bool:
        return self.subtype in (SUBTYPE_UNALLOCATED, SUBTYPE_DEFICIT)


@dataclass(frozen=True)
class MoneyFlowLink:
    source_id: str
    target_id: str
    value: Decimal


@dataclass(frozen=True)
class MoneyFlow:
    nodes: Tuple[MoneyFlowNode, ...] = ()
    links: Tuple[MoneyFlowLink, ...] = ()


@dataclass(frozen=True)
class WeeklyHeatmap:
    categories: Tuple[str, ...]
    weekdays: Tuple[str, ...]
    matrix: Tuple[Tuple[Decimal, ...], ...]  # [weekday][category column]


@dataclass(frozen=True)
class DailyTransaction:
    category: str
    amount: Decimal
    description: str


@dataclass(frozen=True)
class RecentTransaction:
    id: Any
    kind: str
    category: str
    value: Decimal
    occurred_at: datetime
    description: str


@dataclass(frozen=True)
class SnapshotOptions:
    """Caller-tunable knobs for one snapshot computation"""

    monthly_window: int = 6
    heatmap_top_k: int = 5
    recent_limit: int = 5
    default_category: str = DEFAULT_CATEGORY
    color_policy: str = "rank"  # rank | hash
    organization_id: Optional[str] = None
    category_subtypes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Every derived view computed from one normalized ledger"""

    summary: FinancialSummary
    monthly: Tuple[MonthlyBucket, ...]
    categories: Tuple[ExpenseCategory, ...]
    money_flow: MoneyFlow
    heatmap: WeeklyHeatmap
    daily_transactions: Mapping[str, Tuple[DailyTransaction, ...]]
    recent_transactions: Tuple[RecentTransaction, ...]
    skipped: Tuple[SkippedEntry, ...] = ()
