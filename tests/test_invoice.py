"""Tests for invoice issuance and status changes."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from buildledger.domain.accounts import ACCOUNTS_RECEIVABLE, CASH
from buildledger.domain.entities import InvoiceStatus
from buildledger.domain.errors import ConflictError, NotFoundError, ValidationError
from buildledger.domain.ledger import REFERENCE_PAYMENT


def test_issue_invoice(invoice_service, sample_project):
    """Issued invoices start pending and carry their project name."""
    invoice = invoice_service.issue_invoice(
        invoice_number="INV-010",
        client_name="Northwind",
        amount=Decimal("1500.75"),
        due_date=date(2025, 5, 1),
        project_id=sample_project.id,
    )

    assert invoice.id is not None
    assert invoice.status == InvoiceStatus.PENDING
    assert invoice.amount == Decimal("1500.75")
    assert invoice.paid_date is None
    assert invoice.project_name == "Harbor Warehouse"


def test_issue_invoice_without_project(invoice_service):
    """An invoice may be issued without a project."""
    invoice = invoice_service.issue_invoice(
        invoice_number="INV-011",
        client_name="Northwind",
        amount=Decimal("10"),
        due_date=date(2025, 5, 1),
    )
    assert invoice.project_id is None
    assert invoice.project_name is None


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_issue_invoice_rejects_non_positive_amount(invoice_service, temp_db, amount):
    """Non-positive amounts are rejected and nothing is stored."""
    with pytest.raises(ValidationError):
        invoice_service.issue_invoice(
            invoice_number="INV-012", client_name="Northwind", amount=amount, due_date=date(2025, 5, 1)
        )
    assert temp_db.get_invoice_by_number("INV-012") is None


def test_issue_invoice_requires_fields(invoice_service):
    """Blank required fields raise ValidationError."""
    with pytest.raises(ValidationError, match="client_name"):
        invoice_service.issue_invoice(
            invoice_number="INV-013", client_name="  ", amount=Decimal("10"), due_date=date(2025, 5, 1)
        )


def test_issue_invoice_duplicate_number(invoice_service, sample_invoice, registry):
    """Reusing an invoice number is a conflict and posts nothing."""
    with pytest.raises(ConflictError):
        invoice_service.issue_invoice(
            invoice_number=sample_invoice.invoice_number,
            client_name="Someone Else",
            amount=Decimal("99"),
            due_date=date(2025, 5, 1),
        )
    assert registry.get_or_fail(ACCOUNTS_RECEIVABLE).balance == Decimal("5000")


def test_issue_invoice_duplicate_number_past_check(
    invoice_service, sample_invoice, registry, temp_db, monkeypatch
):
    """A duplicate that slips past the lookup still surfaces as a conflict."""
    monkeypatch.setattr(temp_db, "get_invoice_by_number", lambda number: None)

    with pytest.raises(ConflictError) as excinfo:
        invoice_service.issue_invoice(
            invoice_number=sample_invoice.invoice_number,
            client_name="Someone Else",
            amount=Decimal("99"),
            due_date=date(2025, 5, 1),
        )

    assert isinstance(excinfo.value.__cause__, IntegrityError)
    assert registry.get_or_fail(ACCOUNTS_RECEIVABLE).balance == Decimal("5000")
    assert len(invoice_service.list_invoices()) == 1


def test_issue_invoice_project_missing_past_check(invoice_service, temp_db, monkeypatch):
    """A project that vanishes after the lookup is still a validation error."""
    monkeypatch.setattr(temp_db, "get_project", lambda project_id: None)
    with pytest.raises(ValidationError):
        invoice_service.issue_invoice(
            invoice_number="INV-015",
            client_name="Northwind",
            amount=Decimal("10"),
            due_date=date(2025, 5, 1),
            project_id=4242,
        )


def test_issue_invoice_unknown_project(invoice_service):
    """Referencing a missing project is a validation error."""
    with pytest.raises(ValidationError):
        invoice_service.issue_invoice(
            invoice_number="INV-014",
            client_name="Northwind",
            amount=Decimal("10"),
            due_date=date(2025, 5, 1),
            project_id=4242,
        )


def test_update_status_to_paid_posts_payment(invoice_service, ledger_service, registry, sample_invoice):
    """Setting Paid goes through the ledger payment."""
    invoice = invoice_service.update_status(sample_invoice.id, "Paid")

    assert invoice.status == InvoiceStatus.PAID
    assert invoice.paid_date == date(2025, 3, 15)
    assert registry.get_or_fail(CASH).balance == Decimal("5000")
    assert len(ledger_service.list_transactions(reference_type=REFERENCE_PAYMENT)) == 2


def test_update_status_without_posting(invoice_service, ledger_service, sample_invoice):
    """Non-paid transitions only change the status."""
    invoice = invoice_service.update_status(sample_invoice.id, "Overdue")

    assert invoice.status == InvoiceStatus.OVERDUE
    assert invoice.paid_date is None
    assert ledger_service.list_transactions(reference_type=REFERENCE_PAYMENT) == []

    # Overdue invoices can still be paid
    assert invoice_service.mark_paid(sample_invoice.id).status == InvoiceStatus.PAID


def test_paid_invoice_is_final(invoice_service, sample_invoice):
    """A paid invoice cannot move back to another status."""
    invoice_service.mark_paid(sample_invoice.id)

    with pytest.raises(ConflictError):
        invoice_service.update_status(sample_invoice.id, "Pending")
    assert invoice_service.get_invoice(sample_invoice.id).status == InvoiceStatus.PAID


def test_update_status_unknown_status(invoice_service, sample_invoice):
    """Unknown statuses are rejected."""
    with pytest.raises(ValidationError):
        invoice_service.update_status(sample_invoice.id, "Refunded")


def test_update_status_missing_invoice(invoice_service, registry):
    """Updating a missing invoice raises NotFoundError."""
    with pytest.raises(NotFoundError):
        invoice_service.update_status(999, "Paid")


def test_list_invoices_filters(invoice_service, sample_invoice, sample_project):
    """Invoices can be filtered by status and project."""
    other = invoice_service.issue_invoice(
        invoice_number="INV-020", client_name="Northwind", amount=Decimal("10"), due_date=date(2025, 5, 1)
    )
    invoice_service.mark_paid(other.id)

    assert [inv.id for inv in invoice_service.list_invoices()] == [other.id, sample_invoice.id]
    assert [inv.id for inv in invoice_service.list_invoices(status="Paid")] == [other.id]
    assert [inv.id for inv in invoice_service.list_invoices(project_id=sample_project.id)] == [
        sample_invoice.id
    ]
    with pytest.raises(ValidationError):
        invoice_service.list_invoices(status="Draft")
