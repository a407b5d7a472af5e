"""SQLAlchemy models for buildledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, scoped_session, Session

Base = declarative_base()

MONEY = Numeric(14, 2)


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_type = Column(String, nullable=False)
    balance = Column(MONEY, default=0, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "account_type IN ('Asset', 'Liability', 'Revenue', 'Expense', 'Equity')",
            name="ck_account_type",
        ),
    )

    # Relationships
    transactions = relationship("Transaction", back_populates="account")


class Transaction(Base):
    """Ledger entry model. Rows are only ever inserted."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    kind = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    description = Column(String, nullable=True)
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        CheckConstraint("kind IN ('Debit', 'Credit')", name="ck_transaction_kind"),
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("idx_transactions_account", "account_id"),
        Index("idx_transactions_reference", "reference_id", "reference_type"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")


class Project(Base):
    """Project model."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    budget = Column(MONEY, nullable=False)
    spent = Column(MONEY, default=0, nullable=False)
    progress = Column(Integer, default=0, nullable=True)
    status = Column(String, default="Active", nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_project_progress"),
        CheckConstraint(
            "status IN ('Active', 'Completed', 'On Hold', 'Cancelled')",
            name="ck_project_status",
        ),
        Index("idx_projects_status", "status"),
    )

    # Relationships
    invoices = relationship("Invoice", back_populates="project")


class Invoice(Base):
    """Invoice model."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    invoice_number = Column(String, unique=True, nullable=False)
    client_name = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    status = Column(String, default="Pending", nullable=False)
    due_date = Column(Date, nullable=False)
    paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Paid', 'Overdue', 'Cancelled')",
            name="ck_invoice_status",
        ),
        Index("idx_invoices_status", "status"),
        Index("idx_invoices_project", "project_id"),
    )

    # Relationships
    project = relationship("Project", back_populates="invoices")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> scoped_session[Session]:
    """Create a thread-scoped SQLAlchemy session registry."""
    engine: Engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return scoped_session(sessionmaker(bind=engine))
