"""CLI error handling helpers."""

import click

from buildledger.domain.access import LEDGER_WRITERS, Role, require_role
from buildledger.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_ledger_writer(ctx: click.Context) -> None:
    """Exit unless the CLI role may change invoices and the ledger."""
    try:
        require_role(ctx.obj["principal"], *LEDGER_WRITERS)
    except DomainError as e:
        handle_domain_error(ctx, e)


def require_admin(ctx: click.Context) -> None:
    """Exit unless the CLI acts as an Admin."""
    try:
        require_role(ctx.obj["principal"], Role.ADMIN)
    except DomainError as e:
        handle_domain_error(ctx, e)


def require_chart(ctx: click.Context) -> None:
    """Exit unless every required ledger account exists. Run `init` to seed them."""
    try:
        ctx.obj["registry"].validate()
    except DomainError as e:
        handle_domain_error(ctx, e)
