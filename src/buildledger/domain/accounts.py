"""Chart of accounts: seeded registry and balance mutation."""

from decimal import Decimal
from typing import NamedTuple, Optional

import structlog

from buildledger.database.base import Database
from buildledger.domain.entities import Account, AccountType, EntryKind
from buildledger.domain.errors import (
    AccountMissingError,
    NotFoundError,
    account_not_found,
    accounts_missing,
)

logger = structlog.get_logger(__name__)

CASH = "Cash"
ACCOUNTS_RECEIVABLE = "Accounts Receivable"
REVENUE = "Revenue"


class SeedAccount(NamedTuple):
    name: str
    account_type: AccountType
    description: str


DEFAULT_CHART_OF_ACCOUNTS: tuple[SeedAccount, ...] = (
    SeedAccount(CASH, AccountType.ASSET, "Cash on hand and in bank"),
    SeedAccount(ACCOUNTS_RECEIVABLE, AccountType.ASSET, "Money owed by clients"),
    SeedAccount("Equipment", AccountType.ASSET, "Construction equipment and machinery"),
    SeedAccount("Accounts Payable", AccountType.LIABILITY, "Money owed to suppliers"),
    SeedAccount(REVENUE, AccountType.REVENUE, "Income from projects"),
    SeedAccount("Labor Expense", AccountType.EXPENSE, "Wages and salaries"),
    SeedAccount("Materials Expense", AccountType.EXPENSE, "Construction materials cost"),
    SeedAccount("Equipment Expense", AccountType.EXPENSE, "Equipment rental and maintenance"),
)


def signed_amount(account_type: AccountType, kind: EntryKind, amount: Decimal) -> Decimal:
    """Return the balance delta a posting applies to an account.

    Debits increase asset and expense accounts; credits increase liability,
    revenue and equity accounts. The opposite side decreases the balance.
    """
    increases = (kind == EntryKind.DEBIT) == account_type.is_debit_normal
    return amount if increases else -amount


class AccountRegistry:
    """Named lookup over the chart of accounts and the only balance mutator."""

    def __init__(
        self, db: Database, seed: tuple[SeedAccount, ...] = DEFAULT_CHART_OF_ACCOUNTS
    ):
        """Initialize account registry.

        Args:
            db: Database instance
            seed: Accounts that must exist for postings to succeed
        """
        self.db = db
        self.seed = seed

    @classmethod
    def bootstrap(
        cls, db: Database, seed: tuple[SeedAccount, ...] = DEFAULT_CHART_OF_ACCOUNTS
    ) -> "AccountRegistry":
        """Seed any missing accounts, validate the chart, and return a registry.

        Existing accounts are left untouched, balances included.
        """
        registry = cls(db, seed)
        created = []
        with db.unit_of_work():
            for entry in seed:
                if db.get_account_by_name(entry.name) is None:
                    db.create_account(
                        name=entry.name,
                        account_type=entry.account_type.value,
                        description=entry.description,
                    )
                    created.append(entry.name)
        if created:
            logger.info("chart_of_accounts_seeded", created=created)
        registry.validate()
        return registry

    def validate(self) -> None:
        """Ensure every seeded account exists.

        Raises:
            AccountMissingError: Naming every absent account
        """
        missing = [entry.name for entry in self.seed if self.db.get_account_by_name(entry.name) is None]
        if missing:
            raise AccountMissingError(accounts_missing(missing))

    def get_or_fail(self, name: str) -> Account:
        """Get account by name.

        Raises:
            AccountMissingError: If the account does not exist
        """
        account = self.db.get_account_by_name(name)
        if account is None:
            raise AccountMissingError(accounts_missing([name]))
        return account

    def get_account(self, account_id: int) -> Optional[Account]:
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        """List accounts ordered by type, then name."""
        return self.db.list_accounts()

    def apply_delta(self, account_id: int, signed_amount: Decimal) -> Decimal:
        """Atomically add signed_amount to an account balance.

        Returns:
            The new balance

        Raises:
            NotFoundError: If the account does not exist
        """
        new_balance = self.db.increment_account_balance(account_id, signed_amount)
        if new_balance is None:
            raise NotFoundError(account_not_found(account_id))
        return new_balance
