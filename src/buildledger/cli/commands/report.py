"""Reporting commands."""

import json

import click
from buildledger.domain.reporting import ReportingService
from buildledger.serializers import dashboard_to_json, financial_summary_to_json


@click.group()
def report_group():
    """Dashboard and financial reports."""
    pass


@report_group.command("dashboard")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def dashboard(ctx, as_json: bool):
    """Show project, invoice and portfolio risk totals."""
    stats = ReportingService(ctx.obj["db"]).dashboard_stats()

    if as_json:
        click.echo(json.dumps(dashboard_to_json(stats), indent=2))
        return

    projects = stats.projects
    invoices = stats.invoices
    click.echo("\nProjects")
    click.echo(f"  Total: {projects.total}  Active: {projects.active}  Completed: {projects.completed}")
    click.echo(f"  Budget: ${projects.total_budget:,.2f}  Spent: ${projects.total_spent:,.2f}")
    click.echo(f"  Average progress: {projects.avg_progress:.1f}%")

    click.echo("\nInvoices")
    click.echo(
        f"  Total: {invoices.total}  Paid: {invoices.paid}  Pending: {invoices.pending}  "
        f"Overdue: {invoices.overdue}"
    )
    click.echo(
        f"  Revenue: ${invoices.total_revenue:,.2f}  Collected: ${invoices.collected_revenue:,.2f}  "
        f"Outstanding: ${invoices.outstanding_revenue:,.2f}"
    )

    click.echo("\nPortfolio risk")
    click.echo(f"  Average score: {stats.risk.average_risk_score:.2f} ({stats.risk.risk_level.value})")

    if stats.recent_transactions:
        click.echo("\nRecent transactions")
        for txn in stats.recent_transactions:
            click.echo(
                f"  {txn.kind.value:<7} {(txn.account_name or '')[:22]:<22} ${txn.amount:,.2f}  "
                f"{txn.description or ''}"
            )


@report_group.command("financial")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def financial(ctx, as_json: bool):
    """Show balance sheet and income statement totals."""
    summary = ReportingService(ctx.obj["db"]).financial_summary()

    if as_json:
        click.echo(json.dumps(financial_summary_to_json(summary), indent=2))
        return

    click.echo("\nBalance sheet")
    click.echo(f"  Assets:      ${summary.assets:,.2f}")
    click.echo(f"  Liabilities: ${summary.liabilities:,.2f}")
    click.echo(f"  Equity:      ${summary.equity:,.2f}")

    click.echo("\nIncome statement")
    click.echo(f"  Revenue:     ${summary.revenue:,.2f}")
    click.echo(f"  Expenses:    ${summary.expenses:,.2f}")
    click.echo(f"  Net income:  ${summary.net_income:,.2f}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
