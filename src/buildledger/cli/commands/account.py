"""Chart of accounts commands."""

import click


@click.group()
def account_group():
    """Inspect the chart of accounts."""
    pass


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List accounts with their balances, grouped by type."""
    registry = ctx.obj["registry"]

    accounts = registry.list_accounts()
    if not accounts:
        click.echo("No accounts found. Run 'buildledger init' to seed the chart of accounts.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:22s} | {acc.account_type.value:10s} | "
            f"Balance: ${acc.balance:,.2f}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
