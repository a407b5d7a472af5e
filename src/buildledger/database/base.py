"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from buildledger.domain.entities import (
    Account,
    Transaction,
    Invoice,
    Project,
)


class Database(ABC):
    """Abstract database interface for buildledger.

    Write methods commit immediately when called on their own. Inside
    ``unit_of_work()`` they only flush, and the unit commits or rolls back
    everything at once.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Open an all-or-nothing transactional boundary.

        Nested units join the outermost one.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self, name: str, account_type: str, description: Optional[str] = None
    ) -> int:
        """Create an account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[Account]:
        """Get account by its unique name."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by type, then name."""
        pass

    @abstractmethod
    def increment_account_balance(self, account_id: int, delta: Decimal) -> Optional[Decimal]:
        """Atomically add delta to an account balance.

        Returns the new balance, or None if the account does not exist.
        """
        pass

    @abstractmethod
    def get_balances_by_type(self) -> list[dict[str, Any]]:
        """Sum account balances per account type.

        Returns a list of dictionaries with account_type and total_balance.
        """
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        kind: str,
        amount: Decimal,
        description: Optional[str] = None,
        reference_id: Optional[int] = None,
        reference_type: Optional[str] = None,
    ) -> int:
        """Insert a ledger entry. Returns transaction ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List ledger entries newest first, joined with their account.

        Args:
            account_id: Optional account ID filter
            reference_type: Optional reference type filter (e.g. 'Invoice')
            reference_id: Optional reference ID filter
            limit: Optional maximum number of rows
        """
        pass

    @abstractmethod
    def get_transaction_totals(self) -> dict[int, dict[str, Decimal]]:
        """Sum ledger entry amounts per account and kind.

        Returns a mapping of account ID to {'Debit': total, 'Credit': total}.
        """
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(
        self,
        invoice_number: str,
        client_name: str,
        amount: Decimal,
        due_date: date,
        project_id: Optional[int] = None,
    ) -> int:
        """Create a pending invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""
        pass

    @abstractmethod
    def get_invoice_by_number(self, invoice_number: str) -> Optional[Invoice]:
        """Get invoice by its unique number."""
        pass

    @abstractmethod
    def list_invoices(
        self, status: Optional[str] = None, project_id: Optional[int] = None
    ) -> list[Invoice]:
        """List invoices newest first, optionally filtered."""
        pass

    @abstractmethod
    def update_invoice_status(self, invoice_id: int, status: str) -> None:
        """Set an invoice status without touching paid_date."""
        pass

    @abstractmethod
    def mark_invoice_paid(self, invoice_id: int, paid_date: date) -> bool:
        """Transition an invoice to Paid unless it already is.

        Returns True only for the caller that performed the transition.
        """
        pass

    @abstractmethod
    def get_invoice_stats(self) -> dict[str, Any]:
        """Aggregate invoice counts and amounts by status."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self,
        name: str,
        budget: Decimal,
        description: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def list_projects(self, status: Optional[str] = None) -> list[Project]:
        """List projects newest first, optionally filtered by status."""
        pass

    @abstractmethod
    def update_project(
        self,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[Decimal] = None,
        spent: Optional[Decimal] = None,
        progress: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> None:
        """Update the given project fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_project(self, project_id: int) -> bool:
        """Delete a project. Returns False if it did not exist."""
        pass

    @abstractmethod
    def get_project_stats(self) -> dict[str, Any]:
        """Aggregate project counts, budget totals and average progress."""
        pass
