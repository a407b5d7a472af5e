"""Domain model entities for buildledger.

These are pure data classes representing business concepts, independent of
database schema. Services and handlers only ever see these; ORM rows are
converted at the database boundary.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Chart-of-accounts classification."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    REVENUE = "Revenue"
    EXPENSE = "Expense"
    EQUITY = "Equity"

    @property
    def is_debit_normal(self) -> bool:
        """True when a debit increases the balance of this account type."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class EntryKind(str, Enum):
    """Side of a ledger entry."""

    DEBIT = "Debit"
    CREDIT = "Credit"


class InvoiceStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class ProjectStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"
    CANCELLED = "Cancelled"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry with its running balance."""

    id: int
    name: str
    account_type: AccountType
    balance: Decimal
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Immutable ledger entry posted against one account."""

    id: int
    account_id: int
    kind: EntryKind
    amount: Decimal
    description: Optional[str]
    reference_id: Optional[int]
    reference_type: Optional[str]
    created_at: datetime
    account_name: Optional[str] = None
    account_type: Optional[AccountType] = None


@dataclass(frozen=True)
class Invoice:
    """Client invoice."""

    id: int
    invoice_number: str
    client_name: str
    amount: Decimal
    status: InvoiceStatus
    due_date: date
    paid_date: Optional[date]
    project_id: Optional[int]
    created_at: datetime
    project_name: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Construction project with budget and schedule signals."""

    id: int
    name: str
    description: Optional[str]
    budget: Decimal
    spent: Decimal
    progress: Optional[int]
    status: ProjectStatus
    start_date: Optional[date]
    end_date: Optional[date]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BalanceMismatch:
    """Account whose stored balance disagrees with its transactions."""

    account_id: int
    account_name: str
    stored_balance: Decimal
    expected_balance: Decimal


@dataclass(frozen=True)
class RiskFactor:
    name: str
    severity: RiskLevel
    description: str


@dataclass(frozen=True)
class ProjectMetrics:
    budget: Decimal
    spent: Decimal
    remaining: Decimal
    budget_used_percent: Optional[Decimal]
    progress: int
    status: ProjectStatus


@dataclass(frozen=True)
class RiskAssessment:
    """Explainable risk score for one project."""

    project_id: int
    project_name: str
    risk_score: int
    risk_level: RiskLevel
    risk_factors: tuple[RiskFactor, ...]
    metrics: ProjectMetrics
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class ProjectStats:
    total: int
    active: int
    completed: int
    total_budget: Decimal
    total_spent: Decimal
    avg_progress: Decimal


@dataclass(frozen=True)
class InvoiceStats:
    total: int
    paid: int
    pending: int
    overdue: int
    total_revenue: Decimal
    collected_revenue: Decimal
    outstanding_revenue: Decimal


@dataclass(frozen=True)
class PortfolioRisk:
    average_risk_score: Decimal
    risk_level: RiskLevel


@dataclass(frozen=True)
class DashboardStats:
    """Read-only snapshot backing the dashboard."""

    projects: ProjectStats
    invoices: InvoiceStats
    accounts: tuple[Account, ...]
    risk: PortfolioRisk
    recent_transactions: tuple[Transaction, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TypeBalance:
    account_type: AccountType
    total_balance: Decimal


@dataclass(frozen=True)
class FinancialSummary:
    """Balance sheet and income statement derived from account balances."""

    assets: Decimal
    liabilities: Decimal
    equity: Decimal
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    accounts_by_type: tuple[TypeBalance, ...]
