"""Tests for the SQLAlchemy database layer."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from buildledger.database.factories import resolve_database_path


def test_resolve_database_path_precedence(monkeypatch, tmp_path):
    """An explicit path wins over the environment, which wins over the default."""
    monkeypatch.setenv("BUILDLEDGER_DB_PATH", str(tmp_path / "env.db"))
    assert resolve_database_path(str(tmp_path / "cli.db")) == str(tmp_path / "cli.db")
    assert resolve_database_path() == str(tmp_path / "env.db")

    monkeypatch.delenv("BUILDLEDGER_DB_PATH")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_database_path() == str(tmp_path / ".buildledger" / "buildledger.db")
    assert (tmp_path / ".buildledger").is_dir()


def test_unit_of_work_commits(temp_db):
    with temp_db.unit_of_work():
        temp_db.create_account("Cash", "Asset")
        temp_db.create_account("Revenue", "Revenue")

    assert {acc.name for acc in temp_db.list_accounts()} == {"Cash", "Revenue"}


def test_unit_of_work_rolls_back_everything(temp_db):
    """An error anywhere in a unit, nested units included, discards all its writes."""
    with pytest.raises(RuntimeError):
        with temp_db.unit_of_work():
            temp_db.create_account("Cash", "Asset")
            with temp_db.unit_of_work():
                temp_db.create_account("Revenue", "Revenue")
            raise RuntimeError("abort")

    assert temp_db.list_accounts() == []

    # The database is usable again afterwards
    temp_db.create_account("Cash", "Asset")
    assert [acc.name for acc in temp_db.list_accounts()] == ["Cash"]


def test_increment_account_balance(temp_db):
    account_id = temp_db.create_account("Cash", "Asset")
    temp_db.get_account(account_id)

    assert temp_db.increment_account_balance(account_id, Decimal("12.34")) == Decimal("12.34")
    assert temp_db.get_account(account_id).balance == Decimal("12.34")
    assert temp_db.increment_account_balance(9999, Decimal("1")) is None


def test_mark_invoice_paid_only_once(temp_db):
    invoice_id = temp_db.create_invoice("INV-1", "Acme", Decimal("10"), date(2025, 1, 1))

    assert temp_db.mark_invoice_paid(invoice_id, date(2025, 1, 5)) is True
    assert temp_db.mark_invoice_paid(invoice_id, date(2025, 1, 6)) is False
    assert temp_db.get_invoice(invoice_id).paid_date == date(2025, 1, 5)


def test_foreign_keys_enforced(temp_db):
    """Entries cannot reference a missing account."""
    with pytest.raises(IntegrityError):
        with temp_db.unit_of_work():
            temp_db.create_transaction(account_id=42, kind="Debit", amount=Decimal("1"))


def test_check_constraints(temp_db):
    """Entry amounts must be positive."""
    account_id = temp_db.create_account("Cash", "Asset")
    with pytest.raises(IntegrityError):
        with temp_db.unit_of_work():
            temp_db.create_transaction(account_id=account_id, kind="Debit", amount=Decimal("-1"))
