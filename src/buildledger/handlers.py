"""Request handlers for the web layer.

Routing, request parsing and authentication live in the hosting web
framework. Each handler takes the authenticated principal plus the decoded
JSON payload or query parameters and returns a ``Response`` carrying the HTTP
status and a JSON-serializable body.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

import structlog

from buildledger.database.base import Database
from buildledger.domain.access import LEDGER_WRITERS, Principal, Role, require_principal, require_role
from buildledger.domain.accounts import AccountRegistry
from buildledger.domain.errors import (
    AccountMissingError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    PostingFailedError,
    UnauthorizedError,
    ValidationError,
)
from buildledger.domain.invoice import InvoiceService
from buildledger.domain.ledger import DEFAULT_TRANSACTION_LIMIT, LedgerService
from buildledger.domain.project import ProjectService
from buildledger.domain.reporting import ReportingService
from buildledger.domain.risk import RiskService
from buildledger import serializers
from buildledger.utils.amount_parser import parse_amount
from buildledger.utils.date_parser import parse_date

logger = structlog.get_logger(__name__)

GENERIC_ERROR = "Internal server error."

# Order matters: AccountMissingError is a NotFoundError but a server fault.
_ERROR_STATUS: tuple[tuple[type[DomainError], int], ...] = (
    (AccountMissingError, 500),
    (PostingFailedError, 500),
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
)


@dataclass(frozen=True)
class Response:
    status: int
    body: dict[str, Any]


def status_for(error: DomainError) -> int:
    """HTTP status for a domain error."""
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


def _optional_int(query: Mapping[str, Any], key: str) -> Optional[int]:
    value = query.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be an integer, got '{value}'")


def _optional_amount(payload: Mapping[str, Any], key: str):
    value = payload.get(key)
    return parse_amount(value) if value not in (None, "") else None


def _optional_date(payload: Mapping[str, Any], key: str) -> Optional[date]:
    value = payload.get(key)
    return parse_date(value) if value not in (None, "") else None


class RequestHandlers:
    """Handlers for the finance and insight endpoints."""

    def __init__(
        self,
        db: Database,
        registry: Optional[AccountRegistry] = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ):
        """Initialize handlers.

        Args:
            db: Database instance
            registry: Bootstrapped account registry
            today: Clock for paid dates
            now: Clock for risk scheduling rules

        Raises:
            AccountMissingError: If the chart of accounts is incomplete
        """
        self.db = db
        self.registry = registry if registry is not None else AccountRegistry(db)
        self.registry.validate()
        self.ledger = LedgerService(db, self.registry, today=today)
        self.invoices = InvoiceService(db, self.ledger)
        self.projects = ProjectService(db)
        self.risk = RiskService(db)
        self.reporting = ReportingService(db)
        self.now = now

    def _run(self, operation: str, action: Callable[[], Response]) -> Response:
        try:
            return action()
        except DomainError as exc:
            status = status_for(exc)
            if status >= 500:
                logger.error("handler_failed", operation=operation, status=status, error=str(exc))
            return Response(status, {"error": str(exc)})
        except Exception:
            logger.exception("handler_failed", operation=operation, status=500)
            return Response(500, {"error": GENERIC_ERROR})

    # Finance
    def issue_invoice(self, principal: Optional[Principal], payload: Mapping[str, Any]) -> Response:
        """POST /finance/invoices"""

        def action() -> Response:
            require_role(principal, *LEDGER_WRITERS)
            required = ("invoice_number", "client_name", "amount", "due_date")
            if any(payload.get(key) in (None, "") for key in required):
                raise ValidationError("All invoice fields are required.")

            invoice = self.invoices.issue_invoice(
                invoice_number=str(payload["invoice_number"]).strip(),
                client_name=str(payload["client_name"]).strip(),
                amount=parse_amount(payload["amount"]),
                due_date=parse_date(payload["due_date"]),
                project_id=_optional_int(payload, "project_id"),
            )
            return Response(
                201,
                {
                    "message": "Invoice created successfully",
                    "invoice": serializers.invoice_to_json(invoice),
                },
            )

        return self._run("issue_invoice", action)

    def update_invoice_status(
        self, principal: Optional[Principal], invoice_id: int, payload: Mapping[str, Any]
    ) -> Response:
        """PUT /finance/invoices/:id"""

        def action() -> Response:
            require_role(principal, *LEDGER_WRITERS)
            status = payload.get("status")
            if not status:
                raise ValidationError("Invoice status is required.")
            invoice = self.invoices.update_status(invoice_id, str(status))
            return Response(
                200,
                {
                    "message": "Invoice status updated successfully",
                    "invoice": serializers.invoice_to_json(invoice),
                },
            )

        return self._run("update_invoice_status", action)

    def list_invoices(
        self, principal: Optional[Principal], query: Optional[Mapping[str, Any]] = None
    ) -> Response:
        """GET /finance/invoices"""
        query = query or {}

        def action() -> Response:
            require_principal(principal)
            invoices = self.invoices.list_invoices(
                status=query.get("status") or None,
                project_id=_optional_int(query, "project_id"),
            )
            return Response(
                200,
                {
                    "count": len(invoices),
                    "invoices": [serializers.invoice_to_json(inv) for inv in invoices],
                },
            )

        return self._run("list_invoices", action)

    def list_accounts(self, principal: Optional[Principal]) -> Response:
        """GET /finance/accounts"""

        def action() -> Response:
            require_principal(principal)
            accounts = self.registry.list_accounts()
            return Response(
                200,
                {
                    "count": len(accounts),
                    "accounts": [serializers.account_to_json(acc) for acc in accounts],
                },
            )

        return self._run("list_accounts", action)

    def list_transactions(
        self, principal: Optional[Principal], query: Optional[Mapping[str, Any]] = None
    ) -> Response:
        """GET /finance/transactions?account_id&reference_type"""
        query = query or {}

        def action() -> Response:
            require_principal(principal)
            limit = _optional_int(query, "limit")
            transactions = self.ledger.list_transactions(
                account_id=_optional_int(query, "account_id"),
                reference_type=query.get("reference_type") or None,
                limit=limit if limit is not None else DEFAULT_TRANSACTION_LIMIT,
            )
            return Response(
                200,
                {
                    "count": len(transactions),
                    "transactions": [serializers.transaction_to_json(t) for t in transactions],
                },
            )

        return self._run("list_transactions", action)

    # Projects
    def list_projects(
        self, principal: Optional[Principal], query: Optional[Mapping[str, Any]] = None
    ) -> Response:
        """GET /projects?status"""
        query = query or {}

        def action() -> Response:
            require_principal(principal)
            projects = self.projects.list_projects(status=query.get("status") or None)
            return Response(
                200,
                {
                    "count": len(projects),
                    "projects": [serializers.project_to_json(p) for p in projects],
                },
            )

        return self._run("list_projects", action)

    def get_project(self, principal: Optional[Principal], project_id: int) -> Response:
        """GET /projects/:id"""

        def action() -> Response:
            require_principal(principal)
            project = self.projects.require_project(project_id)
            return Response(200, {"project": serializers.project_to_json(project)})

        return self._run("get_project", action)

    def create_project(self, principal: Optional[Principal], payload: Mapping[str, Any]) -> Response:
        """POST /projects"""

        def action() -> Response:
            require_role(principal, *LEDGER_WRITERS)
            if payload.get("name") in (None, "") or payload.get("budget") in (None, ""):
                raise ValidationError("Project name and budget are required.")

            project = self.projects.create_project(
                name=str(payload["name"]).strip(),
                budget=parse_amount(payload["budget"]),
                description=payload.get("description") or None,
                start_date=_optional_date(payload, "start_date"),
                end_date=_optional_date(payload, "end_date"),
            )
            return Response(
                201,
                {
                    "message": "Project created successfully",
                    "project": serializers.project_to_json(project),
                },
            )

        return self._run("create_project", action)

    def update_project(
        self, principal: Optional[Principal], project_id: int, payload: Mapping[str, Any]
    ) -> Response:
        """PUT /projects/:id"""

        def action() -> Response:
            require_role(principal, *LEDGER_WRITERS)
            project = self.projects.update_project(
                project_id=project_id,
                name=payload.get("name"),
                description=payload.get("description"),
                budget=_optional_amount(payload, "budget"),
                spent=_optional_amount(payload, "spent"),
                progress=_optional_int(payload, "progress"),
                status=payload.get("status") or None,
                start_date=_optional_date(payload, "start_date"),
                end_date=_optional_date(payload, "end_date"),
            )
            return Response(
                200,
                {
                    "message": "Project updated successfully",
                    "project": serializers.project_to_json(project),
                },
            )

        return self._run("update_project", action)

    def delete_project(self, principal: Optional[Principal], project_id: int) -> Response:
        """DELETE /projects/:id"""

        def action() -> Response:
            require_role(principal, Role.ADMIN)
            project = self.projects.delete_project(project_id)
            return Response(
                200,
                {
                    "message": "Project deleted successfully",
                    "project": serializers.project_to_json(project),
                },
            )

        return self._run("delete_project", action)

    # Insights
    def project_risk(self, principal: Optional[Principal], project_id: int) -> Response:
        """GET /insights/risk/:id"""

        def action() -> Response:
            require_principal(principal)
            assessment = self.risk.assess(project_id, now=self.now())
            return Response(200, serializers.risk_to_json(assessment))

        return self._run("project_risk", action)

    def dashboard(self, principal: Optional[Principal]) -> Response:
        """GET /insights/dashboard"""

        def action() -> Response:
            require_principal(principal)
            return Response(200, serializers.dashboard_to_json(self.reporting.dashboard_stats()))

        return self._run("dashboard", action)

    def financial_summary(self, principal: Optional[Principal]) -> Response:
        """GET /insights/financial-summary"""

        def action() -> Response:
            require_principal(principal)
            return Response(
                200, serializers.financial_summary_to_json(self.reporting.financial_summary())
            )

        return self._run("financial_summary", action)
