"""Read-only rollups for the dashboard and financial reports."""

from decimal import Decimal, ROUND_HALF_UP

from buildledger.database.base import Database
from buildledger.domain.entities import (
    AccountType,
    DashboardStats,
    FinancialSummary,
    InvoiceStats,
    PortfolioRisk,
    ProjectStats,
    ProjectStatus,
    RiskLevel,
    TypeBalance,
)
from buildledger.domain.risk import BUDGET_BANDS, budget_used_percent, coerce_progress, match_band

RECENT_TRANSACTIONS = 10


def portfolio_risk_level(average: Decimal) -> RiskLevel:
    """Map an average budget-band score to a level. The scale tops out at High."""
    if average >= 40:
        return RiskLevel.HIGH
    if average >= 20:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class ReportingService:
    """Service building dashboard and financial snapshots from stored state."""

    def __init__(self, db: Database):
        """Initialize reporting service.

        Args:
            db: Database instance
        """
        self.db = db

    def average_budget_risk(self) -> PortfolioRisk:
        """Average the budget-vs-progress band score over active projects.

        Only the budget rule is applied here; a project without a positive
        budget contributes 0.
        """
        projects = self.db.list_projects(status=ProjectStatus.ACTIVE.value)
        total = 0
        for project in projects:
            used_percent = budget_used_percent(project.budget, project.spent)
            if used_percent is None:
                continue
            band = match_band(used_percent - coerce_progress(project.progress), BUDGET_BANDS)
            if band is not None:
                total += band.points

        average = Decimal(total) / len(projects) if projects else Decimal("0")
        average = average.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return PortfolioRisk(average_risk_score=average, risk_level=portfolio_risk_level(average))

    def dashboard_stats(self, recent_limit: int = RECENT_TRANSACTIONS) -> DashboardStats:
        """Build the dashboard snapshot.

        Args:
            recent_limit: Number of most recent ledger entries to include

        Returns:
            DashboardStats with project, invoice, account, risk and ledger data
        """
        project_row = self.db.get_project_stats()
        invoice_row = self.db.get_invoice_stats()

        return DashboardStats(
            projects=ProjectStats(
                total=project_row["total"],
                active=project_row["active"],
                completed=project_row["completed"],
                total_budget=project_row["total_budget"],
                total_spent=project_row["total_spent"],
                avg_progress=project_row["avg_progress"],
            ),
            invoices=InvoiceStats(
                total=invoice_row["total"],
                paid=invoice_row["paid"],
                pending=invoice_row["pending"],
                overdue=invoice_row["overdue"],
                total_revenue=invoice_row["total_revenue"],
                collected_revenue=invoice_row["collected_revenue"],
                outstanding_revenue=invoice_row["outstanding_revenue"],
            ),
            accounts=tuple(self.db.list_accounts()),
            risk=self.average_budget_risk(),
            recent_transactions=tuple(self.db.list_transactions(limit=recent_limit)),
        )

    def financial_summary(self) -> FinancialSummary:
        """Build balance sheet and income statement totals from account balances."""
        rows = self.db.get_balances_by_type()
        by_type = {AccountType(row["account_type"]): row["total_balance"] for row in rows}

        assets = by_type.get(AccountType.ASSET, Decimal("0"))
        liabilities = by_type.get(AccountType.LIABILITY, Decimal("0"))
        revenue = by_type.get(AccountType.REVENUE, Decimal("0"))
        expenses = by_type.get(AccountType.EXPENSE, Decimal("0"))

        return FinancialSummary(
            assets=assets,
            liabilities=liabilities,
            equity=assets - liabilities,
            revenue=revenue,
            expenses=expenses,
            net_income=revenue - expenses,
            accounts_by_type=tuple(
                TypeBalance(account_type=AccountType(row["account_type"]), total_balance=row["total_balance"])
                for row in rows
            ),
        )
