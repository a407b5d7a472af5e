"""JSON-ready representations of domain entities.

Money is rendered as floats and dates as ISO strings, matching the response
bodies the web client consumes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from buildledger.domain.entities import (
    Account,
    BalanceMismatch,
    DashboardStats,
    FinancialSummary,
    Invoice,
    Project,
    RiskAssessment,
    Transaction,
)


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def account_to_json(account: Account) -> dict[str, Any]:
    return {
        "id": account.id,
        "account_name": account.name,
        "account_type": account.account_type.value,
        "balance": _money(account.balance),
        "description": account.description,
        "created_at": _iso(account.created_at),
    }


def transaction_to_json(transaction: Transaction) -> dict[str, Any]:
    return {
        "id": transaction.id,
        "account_id": transaction.account_id,
        "account_name": transaction.account_name,
        "account_type": transaction.account_type.value if transaction.account_type else None,
        "transaction_type": transaction.kind.value,
        "amount": _money(transaction.amount),
        "description": transaction.description,
        "reference_id": transaction.reference_id,
        "reference_type": transaction.reference_type,
        "created_at": _iso(transaction.created_at),
    }


def invoice_to_json(invoice: Invoice) -> dict[str, Any]:
    return {
        "id": invoice.id,
        "project_id": invoice.project_id,
        "project_name": invoice.project_name,
        "invoice_number": invoice.invoice_number,
        "client_name": invoice.client_name,
        "amount": _money(invoice.amount),
        "status": invoice.status.value,
        "due_date": _iso(invoice.due_date),
        "paid_date": _iso(invoice.paid_date),
        "created_at": _iso(invoice.created_at),
    }


def project_to_json(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "budget": _money(project.budget),
        "spent": _money(project.spent),
        "progress": project.progress,
        "status": project.status.value,
        "start_date": _iso(project.start_date),
        "end_date": _iso(project.end_date),
        "created_at": _iso(project.created_at),
        "updated_at": _iso(project.updated_at),
    }


def risk_to_json(assessment: RiskAssessment) -> dict[str, Any]:
    metrics = assessment.metrics
    return {
        "projectId": assessment.project_id,
        "projectName": assessment.project_name,
        "riskScore": assessment.risk_score,
        "riskLevel": assessment.risk_level.value,
        "riskFactors": [
            {
                "factor": factor.name,
                "severity": factor.severity.value,
                "description": factor.description,
            }
            for factor in assessment.risk_factors
        ],
        "projectMetrics": {
            "budget": _money(metrics.budget),
            "spent": _money(metrics.spent),
            "remaining": _money(metrics.remaining),
            "budgetUsedPercent": (
                f"{metrics.budget_used_percent:.2f}"
                if metrics.budget_used_percent is not None
                else None
            ),
            "progress": metrics.progress,
            "status": metrics.status.value,
        },
        "recommendations": list(assessment.recommendations),
    }


def dashboard_to_json(stats: DashboardStats) -> dict[str, Any]:
    projects = stats.projects
    invoices = stats.invoices
    return {
        "projects": {
            "total": projects.total,
            "active": projects.active,
            "completed": projects.completed,
            "totalBudget": _money(projects.total_budget),
            "totalSpent": _money(projects.total_spent),
            "avgProgress": _money(projects.avg_progress),
        },
        "finance": {
            "totalInvoices": invoices.total,
            "paidInvoices": invoices.paid,
            "pendingInvoices": invoices.pending,
            "overdueInvoices": invoices.overdue,
            "totalRevenue": _money(invoices.total_revenue),
            "collectedRevenue": _money(invoices.collected_revenue),
            "outstandingRevenue": _money(invoices.outstanding_revenue),
        },
        "accounts": [account_to_json(account) for account in stats.accounts],
        "risk": {
            "averageRiskScore": f"{stats.risk.average_risk_score:.2f}",
            "riskLevel": stats.risk.risk_level.value,
        },
        "recentTransactions": [transaction_to_json(txn) for txn in stats.recent_transactions],
    }


def financial_summary_to_json(summary: FinancialSummary) -> dict[str, Any]:
    return {
        "balanceSheet": {
            "assets": _money(summary.assets),
            "liabilities": _money(summary.liabilities),
            "equity": _money(summary.equity),
        },
        "incomeStatement": {
            "revenue": _money(summary.revenue),
            "expenses": _money(summary.expenses),
            "netIncome": _money(summary.net_income),
        },
        "accountsByType": [
            {"account_type": row.account_type.value, "total_balance": _money(row.total_balance)}
            for row in summary.accounts_by_type
        ],
    }


def mismatch_to_json(mismatch: BalanceMismatch) -> dict[str, Any]:
    return {
        "account_id": mismatch.account_id,
        "account_name": mismatch.account_name,
        "stored_balance": _money(mismatch.stored_balance),
        "expected_balance": _money(mismatch.expected_balance),
    }
