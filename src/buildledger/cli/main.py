"""Main CLI entry point."""

import click
from buildledger.database.factories import create_sqlite_database
from buildledger.domain.access import Principal, Role
from buildledger.domain.accounts import AccountRegistry
from buildledger.logging_config import configure_logging

# Import and register all commands at module level
from buildledger.cli.commands import (
    account,
    init_chart,
    invoice,
    project,
    transaction,
    ledger,
    risk,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUILDLEDGER_DB_PATH environment variable)",
    envvar="BUILDLEDGER_DB_PATH",
)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.ADMIN.value,
    show_default=True,
    envvar="BUILDLEDGER_ROLE",
    help="Role to act as; invoice changes require Admin or Manager",
)
@click.option(
    "--log-level",
    envvar="BUILDLEDGER_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Log level for structured logs written to stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, role: str, log_level: str):
    """buildledger - construction ledger and project risk insights.

    Issue invoices and record payments against a double-entry chart of
    accounts, track project budgets and score their risk.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(level=log_level)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["registry"] = AccountRegistry(db)
        ctx.obj["principal"] = Principal(username="cli", role=Role(role))


# Register all commands
account.register_commands(cli)
init_chart.register_commands(cli)
invoice.register_commands(cli)
project.register_commands(cli)
transaction.register_commands(cli)
ledger.register_commands(cli)
risk.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
