"""Ledger consistency commands."""

import json

import click
from buildledger.domain.ledger import LedgerService
from buildledger.serializers import mismatch_to_json


@click.group()
def ledger_group():
    """Check the ledger."""
    pass


@ledger_group.command("verify")
@click.option("--json", "as_json", is_flag=True, help="Print mismatches as JSON")
@click.pass_context
def verify(ctx, as_json: bool):
    """Check every account balance against the sum of its entries.

    Exits with status 1 when any account disagrees.
    """
    ledger = LedgerService(ctx.obj["db"], ctx.obj["registry"])
    mismatches = ledger.verify_balances()

    if as_json:
        click.echo(json.dumps([mismatch_to_json(m) for m in mismatches], indent=2))
    elif not mismatches:
        click.echo("All account balances match their ledger entries.")
    else:
        click.echo(f"Found {len(mismatches)} mismatched account(s):", err=True)
        for m in mismatches:
            click.echo(
                f"  {m.account_name} (ID: {m.account_id}): stored ${m.stored_balance:,.2f}, "
                f"expected ${m.expected_balance:,.2f}",
                err=True,
            )

    if mismatches:
        ctx.exit(1)


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
