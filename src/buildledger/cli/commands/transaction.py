"""Ledger entry listing commands."""

import click
from buildledger.cli.error_handling import handle_domain_error
from buildledger.domain.errors import DomainError
from buildledger.domain.ledger import (
    DEFAULT_TRANSACTION_LIMIT,
    REFERENCE_INVOICE,
    REFERENCE_PAYMENT,
    LedgerService,
)
from buildledger.utils.account_resolver import resolve_account


@click.group()
def transaction_group():
    """Inspect ledger entries."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Filter by account name or ID")
@click.option(
    "--reference-type",
    type=click.Choice([REFERENCE_INVOICE, REFERENCE_PAYMENT]),
    help="Filter by the event that produced the entry",
)
@click.option(
    "--limit",
    type=int,
    default=DEFAULT_TRANSACTION_LIMIT,
    show_default=True,
    help="Maximum number of entries (at most 100)",
)
@click.pass_context
def list_transactions(ctx, account: str | None, reference_type: str | None, limit: int):
    """List ledger entries, newest first.

    Examples:
        buildledger transaction list
        buildledger transaction list --account "Accounts Receivable"
        buildledger transaction list --reference-type Payment --limit 20
    """
    registry = ctx.obj["registry"]
    ledger = LedgerService(ctx.obj["db"], registry)

    try:
        account_id = resolve_account(registry, account) if account is not None else None
        entries = ledger.list_transactions(
            account_id=account_id, reference_type=reference_type, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(entries)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Account':<22} {'Type':<7} {'Amount':>14} {'Ref':<12} Description"
    )
    click.echo("-" * 110)
    for txn in entries:
        created = txn.created_at.strftime("%Y-%m-%d") if txn.created_at else ""
        ref = f"{txn.reference_type or ''} {txn.reference_id or ''}".strip()
        amount_str = f"${txn.amount:,.2f}"
        click.echo(
            f"{txn.id:<6} {created:<12} {(txn.account_name or '')[:22]:<22} {txn.kind.value:<7} "
            f"{amount_str:>14} {ref:<12} {txn.description or ''}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
