"""Chart of accounts bootstrap command."""

import click
from buildledger.cli.error_handling import handle_domain_error
from buildledger.domain.accounts import DEFAULT_CHART_OF_ACCOUNTS, AccountRegistry
from buildledger.domain.errors import DomainError


@click.command("init")
@click.pass_context
def init_chart(ctx):
    """Seed the chart of accounts.

    Safe to run repeatedly: existing accounts and balances are kept.

    Examples:
        buildledger init
    """
    db = ctx.obj["db"]
    existing = {acc.name for acc in db.list_accounts()}

    try:
        registry = AccountRegistry.bootstrap(db)
    except DomainError as e:
        handle_domain_error(ctx, e)
    ctx.obj["registry"] = registry

    created = [entry.name for entry in DEFAULT_CHART_OF_ACCOUNTS if entry.name not in existing]
    if created:
        click.echo(f"Created {len(created)} account(s):")
        for name in created:
            click.echo(f"  {name}")
    else:
        click.echo("Chart of accounts already initialized.")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init_chart)
