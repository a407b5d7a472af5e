"""Invoice domain service."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.exc import IntegrityError

from buildledger.database.base import Database
from buildledger.domain.entities import Invoice as InvoiceEntity, InvoiceStatus
from buildledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_invoice_number,
    invoice_not_found,
    project_not_found,
)
from buildledger.domain.ledger import LedgerService


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    return "foreign key" in str(error.orig).lower()


def parse_invoice_status(status: str) -> InvoiceStatus:
    """Resolve a status name, raising ValidationError for unknown values."""
    try:
        return InvoiceStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in InvoiceStatus)
        raise ValidationError(f"Unknown invoice status '{status}'. Allowed: {allowed}")


class InvoiceService:
    """Service for issuing invoices and driving their status."""

    def __init__(self, db: Database, ledger: Optional[LedgerService] = None):
        """Initialize invoice service.

        Args:
            db: Database instance
            ledger: Ledger service used for postings
        """
        self.db = db
        self.ledger = ledger if ledger is not None else LedgerService(db)

    def issue_invoice(
        self,
        invoice_number: str,
        client_name: str,
        amount: Decimal,
        due_date: date,
        project_id: Optional[int] = None,
    ) -> InvoiceEntity:
        """Create an invoice and post it to the ledger.

        The invoice row and its postings are committed together.

        Args:
            invoice_number: Unique invoice number
            client_name: Client being billed
            amount: Invoice amount, must be positive
            due_date: Payment due date
            project_id: Optional project the invoice belongs to

        Returns:
            The created invoice entity

        Raises:
            ValidationError: If a field is missing or invalid
            ConflictError: If the invoice number is already used
            AccountMissingError: If the chart of accounts is incomplete
            PostingFailedError: If the ledger posting fails
        """
        missing = [
            field_name
            for field_name, value in (
                ("invoice_number", invoice_number),
                ("client_name", client_name),
                ("amount", amount),
                ("due_date", due_date),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise ValidationError(f"Missing required invoice field(s): {', '.join(missing)}")

        try:
            amount = Decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid invoice amount '{amount}'")
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Invoice amount must be greater than zero")

        if self.db.get_invoice_by_number(invoice_number) is not None:
            raise ConflictError(duplicate_invoice_number(invoice_number))

        if project_id is not None and self.db.get_project(project_id) is None:
            raise ValidationError(project_not_found(project_id))

        with self.db.unit_of_work():
            try:
                invoice_id = self.db.create_invoice(
                    invoice_number=invoice_number,
                    client_name=client_name,
                    amount=amount,
                    due_date=due_date,
                    project_id=project_id,
                )
            except IntegrityError as exc:
                # A concurrent writer got past the checks above first
                if _is_foreign_key_violation(exc):
                    raise ValidationError(project_not_found(project_id)) from exc
                raise ConflictError(duplicate_invoice_number(invoice_number)) from exc
            invoice = self.db.get_invoice(invoice_id)
            self.ledger.post_invoice_issued(invoice)

        return self.db.get_invoice(invoice_id)

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceEntity]:
        """Get invoice by ID.

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice entity or None if not found
        """
        return self.db.get_invoice(invoice_id)

    def require_invoice(self, invoice_id: int) -> InvoiceEntity:
        """Get invoice by ID or raise NotFoundError."""
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def list_invoices(
        self, status: Optional[str] = None, project_id: Optional[int] = None
    ) -> list[InvoiceEntity]:
        """List invoices newest first.

        Args:
            status: Optional status filter
            project_id: Optional project ID filter

        Raises:
            ValidationError: If status is not a known invoice status
        """
        if status is not None:
            status = parse_invoice_status(status).value
        return self.db.list_invoices(status=status, project_id=project_id)

    def update_status(self, invoice_id: int, status: str) -> InvoiceEntity:
        """Change an invoice's status.

        Moving to Paid posts the payment (once). Paid invoices are final.

        Raises:
            NotFoundError: If the invoice does not exist
            ValidationError: If the status is unknown
            ConflictError: If a paid invoice would be moved to another status
        """
        new_status = parse_invoice_status(status)
        invoice = self.require_invoice(invoice_id)

        if new_status == InvoiceStatus.PAID:
            return self.ledger.post_invoice_payment(invoice)

        if invoice.status == InvoiceStatus.PAID:
            raise ConflictError(
                f"Invoice {invoice.invoice_number} is already paid and cannot become {new_status.value}"
            )

        self.db.update_invoice_status(invoice_id, new_status.value)
        return self.db.get_invoice(invoice_id)

    def mark_paid(self, invoice_id: int) -> InvoiceEntity:
        """Shortcut for update_status(invoice_id, 'Paid')."""
        return self.update_status(invoice_id, InvoiceStatus.PAID.value)
