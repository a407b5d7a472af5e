"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain never holds an ORM
row that could be mutated or lazily reloaded outside its session.
"""

from decimal import Decimal
from typing import Optional

from buildledger.domain import entities as domain
from buildledger.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    Invoice as ORMInvoice,
    Project as ORMProject,
)


def to_decimal(value) -> Decimal:
    """Normalize a stored numeric to a Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        balance=to_decimal(orm_account.balance),
        description=orm_account.description,
        created_at=orm_account.created_at,
    )


def transaction_to_domain(
    orm_transaction: ORMTransaction, orm_account: Optional[ORMAccount] = None
) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity.

    When the owning account row is supplied its name and type are attached.
    """
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        kind=domain.EntryKind(orm_transaction.kind),
        amount=to_decimal(orm_transaction.amount),
        description=orm_transaction.description,
        reference_id=orm_transaction.reference_id,
        reference_type=orm_transaction.reference_type,
        created_at=orm_transaction.created_at,
        account_name=orm_account.name if orm_account is not None else None,
        account_type=(
            domain.AccountType(orm_account.account_type) if orm_account is not None else None
        ),
    )


def invoice_to_domain(
    orm_invoice: ORMInvoice, project_name: Optional[str] = None
) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        client_name=orm_invoice.client_name,
        amount=to_decimal(orm_invoice.amount),
        status=domain.InvoiceStatus(orm_invoice.status),
        due_date=orm_invoice.due_date,
        paid_date=orm_invoice.paid_date,
        project_id=orm_invoice.project_id,
        created_at=orm_invoice.created_at,
        project_name=project_name,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        name=orm_project.name,
        description=orm_project.description,
        budget=to_decimal(orm_project.budget),
        spent=to_decimal(orm_project.spent),
        progress=orm_project.progress,
        status=domain.ProjectStatus(orm_project.status),
        start_date=orm_project.start_date,
        end_date=orm_project.end_date,
        created_at=orm_project.created_at,
        updated_at=orm_project.updated_at,
    )
