"""Shared pytest fixtures for buildledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from buildledger.database.factories import create_sqlite_database
from buildledger.domain.accounts import AccountRegistry
from buildledger.domain.invoice import InvoiceService
from buildledger.domain.ledger import LedgerService
from buildledger.domain.project import ProjectService
from buildledger.domain.reporting import ReportingService
from buildledger.domain.risk import RiskService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def registry(temp_db):
    """Seed the default chart of accounts and return its registry."""
    return AccountRegistry.bootstrap(temp_db)


@pytest.fixture
def ledger_service(temp_db, registry):
    """Create a LedgerService with a fixed paid date."""
    return LedgerService(temp_db, registry, today=lambda: date(2025, 3, 15))


@pytest.fixture
def invoice_service(temp_db, ledger_service):
    """Create an InvoiceService posting through ledger_service."""
    return InvoiceService(temp_db, ledger_service)


@pytest.fixture
def project_service(temp_db):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db)


@pytest.fixture
def risk_service(temp_db):
    """Create a RiskService with a temporary database."""
    return RiskService(temp_db)


@pytest.fixture
def reporting_service(temp_db):
    """Create a ReportingService with a temporary database."""
    return ReportingService(temp_db)


@pytest.fixture
def sample_project(project_service):
    """Create a sample project for testing."""
    return project_service.create_project(
        name="Harbor Warehouse",
        budget=Decimal("100000"),
        description="Steel frame warehouse",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
    )


@pytest.fixture
def sample_invoice(invoice_service, sample_project):
    """Issue a sample invoice for 5000 against the sample project."""
    return invoice_service.issue_invoice(
        invoice_number="INV-001",
        client_name="Acme Logistics",
        amount=Decimal("5000"),
        due_date=date(2025, 4, 1),
        project_id=sample_project.id,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
