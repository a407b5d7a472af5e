"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class AccountMissingError(NotFoundError):
    """A seeded chart-of-accounts entry is absent (configuration fault)."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PostingFailedError(DomainError):
    """A ledger unit of work could not complete and was rolled back."""


class UnauthorizedError(DomainError):
    """No authenticated principal was supplied."""


class ForbiddenError(DomainError):
    """The principal's role does not allow the operation."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account by ID."""
    return f"Account {account_id} not found"


def accounts_missing(names: Iterable[str]) -> str:
    """Return message for absent chart-of-accounts entries."""
    quoted = ", ".join(f"'{name}'" for name in names)
    return f"Required account(s) missing from chart of accounts: {quoted}"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def project_has_invoices(project_id: int, count: int) -> str:
    """Return message when a project cannot be deleted because invoices reference it."""
    return f"Project {project_id} has {count} invoice(s) and cannot be deleted"


def duplicate_invoice_number(invoice_number: str) -> str:
    """Return message for duplicate invoice number."""
    return f"Invoice with number '{invoice_number}' already exists"


def posting_failed(operation: str, invoice_id: Optional[int], amount: Decimal) -> str:
    """Return message when a ledger posting was rolled back."""
    target = f"invoice {invoice_id}" if invoice_id is not None else "new invoice"
    return f"Could not complete {operation} for {target} (amount {amount}); ledger unchanged"
