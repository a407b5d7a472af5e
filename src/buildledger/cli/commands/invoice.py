"""Invoice commands."""

import click
from buildledger.cli.error_handling import handle_domain_error, require_chart, require_ledger_writer
from buildledger.domain.entities import InvoiceStatus
from buildledger.domain.errors import DomainError
from buildledger.domain.invoice import InvoiceService
from buildledger.domain.ledger import LedgerService
from buildledger.utils.amount_parser import parse_amount
from buildledger.utils.date_parser import parse_date


def _invoice_service(ctx) -> InvoiceService:
    db = ctx.obj["db"]
    return InvoiceService(db, LedgerService(db, ctx.obj["registry"]))


def _echo_invoice(invoice) -> None:
    click.echo(f"  Number: {invoice.invoice_number}")
    click.echo(f"  Client: {invoice.client_name}")
    click.echo(f"  Amount: ${invoice.amount:,.2f}")
    click.echo(f"  Status: {invoice.status.value}")
    click.echo(f"  Due: {invoice.due_date}")
    if invoice.paid_date:
        click.echo(f"  Paid: {invoice.paid_date}")
    if invoice.project_name:
        click.echo(f"  Project: {invoice.project_name} (ID: {invoice.project_id})")


@click.group()
def invoice_group():
    """Issue invoices and record payments."""
    pass


@invoice_group.command("issue")
@click.argument("invoice_number", metavar="INVOICE_NUMBER")
@click.option("--client", required=True, help="Client name")
@click.option("--amount", required=True, help="Invoice amount (e.g., 5000 or 5,000.00)")
@click.option(
    "--due",
    "due_date",
    required=True,
    help="Due date (YYYY-MM-DD or relative like 'in 30 days', 'next month')",
)
@click.option("--project", "project_id", type=int, help="Project ID the invoice belongs to")
@click.pass_context
def issue_invoice(ctx, invoice_number: str, client: str, amount: str, due_date: str, project_id: int | None):
    """Issue an invoice and post it to the ledger.

    Debits Accounts Receivable and credits Revenue for the invoice amount.

    Examples:
        buildledger invoice issue INV-001 --client "Acme" --amount 5000 --due "in 30 days"
        buildledger invoice issue INV-002 --client "Acme" --amount 1200.50 --due 2025-03-01 --project 1
    """
    require_ledger_writer(ctx)
    require_chart(ctx)
    service = _invoice_service(ctx)

    try:
        invoice = service.issue_invoice(
            invoice_number=invoice_number,
            client_name=client,
            amount=parse_amount(amount),
            due_date=parse_date(due_date),
            project_id=project_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Issued invoice '{invoice.invoice_number}' (ID: {invoice.id})")
    _echo_invoice(invoice)


@invoice_group.command("pay")
@click.argument("invoice_id", type=int)
@click.pass_context
def pay_invoice(ctx, invoice_id: int):
    """Mark an invoice paid and post the payment.

    Debits Cash and credits Accounts Receivable. Paying an already paid
    invoice changes nothing.
    """
    require_ledger_writer(ctx)
    require_chart(ctx)
    service = _invoice_service(ctx)

    try:
        before = service.require_invoice(invoice_id)
        invoice = service.mark_paid(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if before.status == InvoiceStatus.PAID:
        click.echo(f"Invoice '{invoice.invoice_number}' was already paid; nothing posted.")
    else:
        click.echo(f"Recorded payment for invoice '{invoice.invoice_number}'")
    _echo_invoice(invoice)


@invoice_group.command("status")
@click.argument("invoice_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in InvoiceStatus]))
@click.pass_context
def set_status(ctx, invoice_id: int, status: str):
    """Change an invoice's status.

    Setting 'Paid' posts the payment. Paid invoices cannot change status.
    """
    require_ledger_writer(ctx)
    require_chart(ctx)
    service = _invoice_service(ctx)

    try:
        invoice = service.update_status(invoice_id, status)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Invoice '{invoice.invoice_number}' is now {invoice.status.value}")


@invoice_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in InvoiceStatus]), help="Filter by status")
@click.option("--project", "project_id", type=int, help="Filter by project ID")
@click.pass_context
def list_invoices(ctx, status: str | None, project_id: int | None):
    """List invoices, newest first."""
    service = _invoice_service(ctx)

    try:
        invoices = service.list_invoices(status=status, project_id=project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"\nFound {len(invoices)} invoice(s):")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Number':<14} {'Client':<24} {'Amount':>14} {'Status':<10} {'Due':<12} {'Project':<20}"
    )
    click.echo("-" * 100)
    for inv in invoices:
        amount_str = f"${inv.amount:,.2f}"
        click.echo(
            f"{inv.id:<6} {inv.invoice_number:<14} {inv.client_name[:24]:<24} {amount_str:>14} "
            f"{inv.status.value:<10} {str(inv.due_date):<12} {(inv.project_name or '')[:20]:<20}"
        )


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
