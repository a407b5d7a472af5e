"""Ledger domain service: double-entry postings for invoice events."""

import threading
import weakref
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Callable, Iterator, Optional

import structlog

from buildledger.database.base import Database
from buildledger.domain.accounts import (
    ACCOUNTS_RECEIVABLE,
    CASH,
    REVENUE,
    AccountRegistry,
    signed_amount,
)
from buildledger.domain.entities import (
    Account,
    BalanceMismatch,
    EntryKind,
    Invoice,
    InvoiceStatus,
    Transaction,
)
from buildledger.domain.errors import (
    AccountMissingError,
    NotFoundError,
    PostingFailedError,
    ValidationError,
    invoice_not_found,
    posting_failed,
)

logger = structlog.get_logger(__name__)

REFERENCE_INVOICE = "Invoice"
REFERENCE_PAYMENT = "Payment"

DEFAULT_TRANSACTION_LIMIT = 100
MAX_TRANSACTION_LIMIT = 100

_lock_guard = threading.Lock()
_invoice_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _invoice_lock(invoice_id: int) -> threading.Lock:
    """Return the process-wide lock serializing payments of one invoice."""
    with _lock_guard:
        lock = _invoice_locks.get(invoice_id)
        if lock is None:
            lock = threading.Lock()
            _invoice_locks[invoice_id] = lock
        return lock


class LedgerService:
    """Service posting balanced ledger entries for invoice lifecycle events."""

    def __init__(
        self,
        db: Database,
        registry: Optional[AccountRegistry] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize ledger service.

        Args:
            db: Database instance
            registry: Account registry; a non-seeding one is built if omitted
            today: Clock used for paid dates
        """
        self.db = db
        self.registry = registry if registry is not None else AccountRegistry(db)
        self.today = today

    @contextmanager
    def _posting(
        self, operation: str, invoice_id: Optional[int], amount: Decimal
    ) -> Iterator[None]:
        """Run a posting as one unit of work, translating unexpected failures."""
        try:
            with self.db.unit_of_work():
                yield
        except (ValidationError, AccountMissingError, PostingFailedError):
            raise
        except Exception as exc:
            logger.error(
                "posting_failed",
                operation=operation,
                invoice_id=invoice_id,
                amount=str(amount),
                error=repr(exc),
            )
            raise PostingFailedError(posting_failed(operation, invoice_id, amount)) from exc

    def _post(
        self,
        account: Account,
        kind: EntryKind,
        amount: Decimal,
        description: str,
        reference_id: int,
        reference_type: str,
    ) -> Decimal:
        self.db.create_transaction(
            account_id=account.id,
            kind=kind.value,
            amount=amount,
            description=description,
            reference_id=reference_id,
            reference_type=reference_type,
        )
        return self.registry.apply_delta(
            account.id, signed_amount(account.account_type, kind, amount)
        )

    def post_invoice_issued(self, invoice: Invoice) -> None:
        """Record a newly issued invoice: debit receivables, credit revenue.

        Args:
            invoice: Persisted invoice with a positive amount

        Raises:
            ValidationError: If the amount is not positive
            AccountMissingError: If a required account is absent (nothing posted)
            PostingFailedError: If any step fails (nothing posted)
        """
        amount = invoice.amount
        if amount is None or amount <= 0:
            raise ValidationError("Invoice amount must be greater than zero")

        with self._posting("invoice_issued", invoice.id, amount):
            receivable = self.registry.get_or_fail(ACCOUNTS_RECEIVABLE)
            revenue = self.registry.get_or_fail(REVENUE)
            self._post(
                receivable,
                EntryKind.DEBIT,
                amount,
                f"Invoice {invoice.invoice_number} for {invoice.client_name}",
                invoice.id,
                REFERENCE_INVOICE,
            )
            self._post(
                revenue,
                EntryKind.CREDIT,
                amount,
                f"Revenue from Invoice {invoice.invoice_number}",
                invoice.id,
                REFERENCE_INVOICE,
            )

        logger.info(
            "invoice_issued",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            amount=str(amount),
        )

    def post_invoice_payment(self, invoice: Invoice) -> Invoice:
        """Mark an invoice paid and move its amount from receivables to cash.

        Calling this on an already paid invoice posts nothing.

        Args:
            invoice: Invoice to settle

        Returns:
            The invoice as stored after the call

        Raises:
            NotFoundError: If the invoice no longer exists
            AccountMissingError: If a required account is absent (nothing applied)
            PostingFailedError: If any step fails (nothing applied)
        """
        with _invoice_lock(invoice.id):
            current = self.db.get_invoice(invoice.id)
            if current is None:
                raise NotFoundError(invoice_not_found(invoice.id))
            if current.status == InvoiceStatus.PAID:
                logger.info("invoice_payment_skipped", invoice_id=invoice.id, reason="already_paid")
                return current

            transitioned = False
            with self._posting("invoice_payment", current.id, current.amount):
                # Re-checked in the same unit so only one caller can win
                if self.db.mark_invoice_paid(current.id, self.today()):
                    transitioned = True
                    cash = self.registry.get_or_fail(CASH)
                    receivable = self.registry.get_or_fail(ACCOUNTS_RECEIVABLE)
                    description = f"Payment received for Invoice {current.invoice_number}"
                    self._post(
                        cash, EntryKind.DEBIT, current.amount, description,
                        current.id, REFERENCE_PAYMENT,
                    )
                    self._post(
                        receivable, EntryKind.CREDIT, current.amount, description,
                        current.id, REFERENCE_PAYMENT,
                    )

            if transitioned:
                logger.info(
                    "invoice_payment_posted",
                    invoice_id=current.id,
                    invoice_number=current.invoice_number,
                    amount=str(current.amount),
                )
            else:
                logger.info("invoice_payment_skipped", invoice_id=current.id, reason="concurrent_payment")

            return self.db.get_invoice(current.id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        reference_type: Optional[str] = None,
        limit: int = DEFAULT_TRANSACTION_LIMIT,
    ) -> list[Transaction]:
        """List ledger entries newest first.

        Args:
            account_id: Optional account ID filter
            reference_type: Optional reference type filter ('Invoice', 'Payment')
            limit: Maximum number of entries, capped at 100

        Returns:
            List of transaction entities with account name and type

        Raises:
            ValidationError: If limit is below 1
        """
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return self.db.list_transactions(
            account_id=account_id,
            reference_type=reference_type,
            limit=min(limit, MAX_TRANSACTION_LIMIT),
        )

    def list_transactions_for_reference(
        self, reference_id: int, reference_type: Optional[str] = None
    ) -> list[Transaction]:
        """List every ledger entry posted for one economic event."""
        return self.db.list_transactions(reference_id=reference_id, reference_type=reference_type)

    def verify_balances(self) -> list[BalanceMismatch]:
        """Compare stored balances with the signed sum of each account's entries.

        Returns:
            Accounts whose balance disagrees with their transactions (empty when consistent)
        """
        totals = self.db.get_transaction_totals()
        mismatches = []
        for account in self.db.list_accounts():
            per_kind = totals.get(account.id, {})
            expected = signed_amount(
                account.account_type, EntryKind.DEBIT, per_kind.get("Debit", Decimal("0"))
            ) + signed_amount(
                account.account_type, EntryKind.CREDIT, per_kind.get("Credit", Decimal("0"))
            )
            if expected != account.balance:
                mismatches.append(
                    BalanceMismatch(
                        account_id=account.id,
                        account_name=account.name,
                        stored_balance=account.balance,
                        expected_balance=expected,
                    )
                )
        return mismatches
