"""Utility for resolving account names to IDs."""

from buildledger.domain.accounts import AccountRegistry
from buildledger.domain.errors import NotFoundError, account_not_found


def resolve_account(registry: AccountRegistry, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        registry: AccountRegistry instance
        account: Account name (e.g. "Accounts Receivable") or ID (int or numeric string)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    # Try to parse as integer (handles string IDs like "1")
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if registry.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        return account_id

    # Not a number, treat as name
    for acc in registry.list_accounts():
        if acc.name.lower() == str(account).strip().lower():
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
