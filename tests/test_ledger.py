"""Tests for ledger postings and balance consistency."""

import threading
from datetime import date
from decimal import Decimal

import pytest

from buildledger.domain.accounts import (
    ACCOUNTS_RECEIVABLE,
    CASH,
    DEFAULT_CHART_OF_ACCOUNTS,
    REVENUE,
    AccountRegistry,
    signed_amount,
)
from buildledger.domain.entities import EntryKind, InvoiceStatus
from buildledger.domain.errors import (
    AccountMissingError,
    PostingFailedError,
    ValidationError,
)
from buildledger.domain.invoice import InvoiceService
from buildledger.domain.ledger import (
    REFERENCE_INVOICE,
    REFERENCE_PAYMENT,
    LedgerService,
)


def _balance(registry, name):
    return registry.get_or_fail(name).balance


def _issue(invoice_service, number, amount):
    return invoice_service.issue_invoice(
        invoice_number=number,
        client_name="Acme Logistics",
        amount=Decimal(amount),
        due_date=date(2025, 4, 1),
    )


def test_issue_posts_receivable_and_revenue(registry, ledger_service, sample_invoice):
    """Issuing an invoice debits receivables and credits revenue."""
    assert _balance(registry, ACCOUNTS_RECEIVABLE) == Decimal("5000")
    assert _balance(registry, REVENUE) == Decimal("5000")
    assert _balance(registry, CASH) == Decimal("0")

    entries = ledger_service.list_transactions_for_reference(sample_invoice.id, REFERENCE_INVOICE)
    assert len(entries) == 2
    by_account = {txn.account_name: txn for txn in entries}
    assert by_account[ACCOUNTS_RECEIVABLE].kind == EntryKind.DEBIT
    assert by_account[ACCOUNTS_RECEIVABLE].description == "Invoice INV-001 for Acme Logistics"
    assert by_account[REVENUE].kind == EntryKind.CREDIT
    assert by_account[REVENUE].description == "Revenue from Invoice INV-001"


def test_issue_round_trip_per_account(registry, ledger_service, sample_invoice):
    """Each side of an issued invoice is listed under its own account."""
    revenue = registry.get_or_fail(REVENUE)
    receivable = registry.get_or_fail(ACCOUNTS_RECEIVABLE)

    revenue_entries = ledger_service.list_transactions(account_id=revenue.id)
    receivable_entries = ledger_service.list_transactions(account_id=receivable.id)

    assert len(revenue_entries) == 1
    assert revenue_entries[0].kind == EntryKind.CREDIT
    assert revenue_entries[0].amount == Decimal("5000")
    assert revenue_entries[0].reference_id == sample_invoice.id
    assert revenue_entries[0].reference_type == REFERENCE_INVOICE

    assert len(receivable_entries) == 1
    assert receivable_entries[0].kind == EntryKind.DEBIT
    assert receivable_entries[0].amount == Decimal("5000")
    assert receivable_entries[0].reference_id == sample_invoice.id


def test_payment_moves_receivable_to_cash(registry, ledger_service, sample_invoice):
    """Paying an invoice debits cash, credits receivables and sets the paid date."""
    paid = ledger_service.post_invoice_payment(sample_invoice)

    assert paid.status == InvoiceStatus.PAID
    assert paid.paid_date == date(2025, 3, 15)
    assert _balance(registry, CASH) == Decimal("5000")
    assert _balance(registry, ACCOUNTS_RECEIVABLE) == Decimal("0")
    assert _balance(registry, REVENUE) == Decimal("5000")

    entries = ledger_service.list_transactions_for_reference(sample_invoice.id, REFERENCE_PAYMENT)
    assert {(txn.account_name, txn.kind) for txn in entries} == {
        (CASH, EntryKind.DEBIT),
        (ACCOUNTS_RECEIVABLE, EntryKind.CREDIT),
    }
    assert all(txn.description == "Payment received for Invoice INV-001" for txn in entries)


def test_payment_is_idempotent(registry, ledger_service, sample_invoice):
    """Paying twice posts exactly the entries of one payment."""
    ledger_service.post_invoice_payment(sample_invoice)
    again = ledger_service.post_invoice_payment(sample_invoice)

    assert again.status == InvoiceStatus.PAID
    assert len(ledger_service.list_transactions(reference_type=REFERENCE_PAYMENT)) == 2
    assert _balance(registry, CASH) == Decimal("5000")
    assert _balance(registry, ACCOUNTS_RECEIVABLE) == Decimal("0")


def test_concurrent_payments_post_once(temp_db, registry, ledger_service, sample_invoice):
    """Racing payments of one invoice still post a single payment."""
    barrier = threading.Barrier(4)
    errors = []

    def pay():
        try:
            barrier.wait()
            ledger_service.post_invoice_payment(sample_invoice)
        except Exception as e:  # pragma: no cover - surfaced by the assertion below
            errors.append(e)
        finally:
            temp_db.disconnect()

    threads = [threading.Thread(target=pay) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(ledger_service.list_transactions(reference_type=REFERENCE_PAYMENT)) == 2
    assert _balance(registry, CASH) == Decimal("5000")
    assert ledger_service.verify_balances() == []


def test_balances_match_entries_after_mixed_activity(registry, invoice_service, ledger_service):
    """Stored balances equal the signed sum of their entries after many postings."""
    invoices = [_issue(invoice_service, f"INV-{n:03d}", amount) for n, amount in
                enumerate(["1200.50", "300", "45.25", "9999.99"], start=1)]
    ledger_service.post_invoice_payment(invoices[0])
    ledger_service.post_invoice_payment(invoices[2])
    ledger_service.post_invoice_payment(invoices[0])

    for account in registry.list_accounts():
        expected = sum(
            (signed_amount(account.account_type, txn.kind, txn.amount)
             for txn in ledger_service.list_transactions(account_id=account.id)),
            Decimal("0"),
        )
        assert account.balance == expected

    assert _balance(registry, CASH) == Decimal("1245.75")
    assert _balance(registry, ACCOUNTS_RECEIVABLE) == Decimal("10299.99")
    assert _balance(registry, REVENUE) == Decimal("11545.74")
    assert ledger_service.verify_balances() == []


def test_failed_issue_posting_leaves_nothing(temp_db, registry, invoice_service, ledger_service, monkeypatch):
    """A failure between the two legs rolls back the invoice and the first leg."""
    original = temp_db.create_transaction
    calls = []

    def failing_create_transaction(*args, **kwargs):
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return original(*args, **kwargs)

    monkeypatch.setattr(temp_db, "create_transaction", failing_create_transaction)

    with pytest.raises(PostingFailedError) as exc_info:
        _issue(invoice_service, "INV-900", "5000")

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert temp_db.get_invoice_by_number("INV-900") is None
    assert ledger_service.list_transactions() == []
    assert all(acc.balance == Decimal("0") for acc in registry.list_accounts())


def test_failed_payment_posting_leaves_invoice_pending(
    temp_db, registry, ledger_service, sample_invoice, monkeypatch
):
    """A failure during payment keeps the invoice pending and balances untouched."""
    original = temp_db.create_transaction
    calls = []

    def failing_create_transaction(*args, **kwargs):
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("connection reset")
        return original(*args, **kwargs)

    monkeypatch.setattr(temp_db, "create_transaction", failing_create_transaction)

    with pytest.raises(PostingFailedError):
        ledger_service.post_invoice_payment(sample_invoice)

    assert temp_db.get_invoice(sample_invoice.id).status == InvoiceStatus.PENDING
    assert ledger_service.list_transactions(reference_type=REFERENCE_PAYMENT) == []
    assert _balance(registry, CASH) == Decimal("0")
    assert _balance(registry, ACCOUNTS_RECEIVABLE) == Decimal("5000")

    # The invoice can still be paid once the fault clears
    monkeypatch.setattr(temp_db, "create_transaction", original)
    assert ledger_service.post_invoice_payment(sample_invoice).status == InvoiceStatus.PAID
    assert _balance(registry, CASH) == Decimal("5000")


def test_missing_cash_account_blocks_payment(temp_db):
    """Payment without a Cash account raises AccountMissingError and changes nothing."""
    seed = tuple(entry for entry in DEFAULT_CHART_OF_ACCOUNTS if entry.name != CASH)
    registry = AccountRegistry.bootstrap(temp_db, seed=seed)
    ledger = LedgerService(temp_db, registry)
    invoices = InvoiceService(temp_db, ledger)
    invoice = _issue(invoices, "INV-100", "750")

    with pytest.raises(AccountMissingError):
        ledger.post_invoice_payment(invoice)

    assert temp_db.get_invoice(invoice.id).status == InvoiceStatus.PENDING
    assert registry.get_or_fail(ACCOUNTS_RECEIVABLE).balance == Decimal("750")
    assert ledger.list_transactions(reference_type=REFERENCE_PAYMENT) == []


def test_missing_revenue_account_blocks_issue(temp_db):
    """Issuing without a Revenue account leaves no invoice and no entries."""
    seed = tuple(entry for entry in DEFAULT_CHART_OF_ACCOUNTS if entry.name != REVENUE)
    registry = AccountRegistry.bootstrap(temp_db, seed=seed)
    ledger = LedgerService(temp_db, registry)
    invoices = InvoiceService(temp_db, ledger)

    with pytest.raises(AccountMissingError):
        _issue(invoices, "INV-101", "750")

    assert temp_db.get_invoice_by_number("INV-101") is None
    assert ledger.list_transactions() == []
    assert registry.get_or_fail(ACCOUNTS_RECEIVABLE).balance == Decimal("0")


def test_post_invoice_issued_rejects_non_positive_amount(ledger_service, sample_invoice):
    """Zero or negative invoice amounts are rejected before posting."""
    from dataclasses import replace

    with pytest.raises(ValidationError):
        ledger_service.post_invoice_issued(replace(sample_invoice, amount=Decimal("0")))
    with pytest.raises(ValidationError):
        ledger_service.post_invoice_issued(replace(sample_invoice, amount=Decimal("-10")))


def test_list_transactions_limit(registry, invoice_service, ledger_service):
    """Listing respects the limit, caps it at 100 and rejects values below 1."""
    for n in range(3):
        _issue(invoice_service, f"INV-{n}", "10")

    assert len(ledger_service.list_transactions(limit=4)) == 4
    assert len(ledger_service.list_transactions(limit=1000)) == 6
    with pytest.raises(ValidationError):
        ledger_service.list_transactions(limit=0)


def test_list_transactions_caps_at_100(invoice_service, ledger_service):
    """More than 100 entries come back as the newest 100."""
    invoices = [_issue(invoice_service, f"INV-{n:03d}", "10") for n in range(51)]

    entries = ledger_service.list_transactions(limit=1000)

    assert len(entries) == 100
    assert {txn.reference_id for txn in entries[:2]} == {invoices[-1].id}
    assert invoices[0].id not in {txn.reference_id for txn in entries}
    assert len(ledger_service.list_transactions()) == 100


def test_list_transactions_newest_first(invoice_service, ledger_service):
    """Entries come back newest first."""
    _issue(invoice_service, "INV-A", "10")
    second = _issue(invoice_service, "INV-B", "20")

    newest = ledger_service.list_transactions(limit=2)
    assert {txn.reference_id for txn in newest} == {second.id}


def test_verify_balances_detects_drift(temp_db, registry, ledger_service, sample_invoice):
    """A balance changed outside the ledger is reported as a mismatch."""
    cash = registry.get_or_fail(CASH)
    temp_db.increment_account_balance(cash.id, Decimal("10"))

    mismatches = ledger_service.verify_balances()

    assert len(mismatches) == 1
    assert mismatches[0].account_name == CASH
    assert mismatches[0].stored_balance == Decimal("10")
    assert mismatches[0].expected_balance == Decimal("0")
