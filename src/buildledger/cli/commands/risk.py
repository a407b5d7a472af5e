"""Project risk command."""

import json

import click
from buildledger.cli.error_handling import handle_domain_error
from buildledger.domain.errors import DomainError
from buildledger.domain.risk import RiskService
from buildledger.serializers import risk_to_json


@click.command("risk")
@click.argument("project_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the assessment as JSON")
@click.pass_context
def risk(ctx, project_id: int, as_json: bool):
    """Score a project's budget and schedule risk.

    Examples:
        buildledger risk 1
        buildledger risk 1 --json
    """
    try:
        assessment = RiskService(ctx.obj["db"]).assess(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if as_json:
        click.echo(json.dumps(risk_to_json(assessment), indent=2))
        return

    metrics = assessment.metrics
    click.echo(f"Project {assessment.project_id}: {assessment.project_name}")
    click.echo(f"  Risk: {assessment.risk_score}/100 ({assessment.risk_level.value})")
    click.echo(f"  Budget: ${metrics.budget:,.2f}  Spent: ${metrics.spent:,.2f}  Remaining: ${metrics.remaining:,.2f}")
    if metrics.budget_used_percent is not None:
        click.echo(f"  Budget used: {metrics.budget_used_percent:.2f}%  Progress: {metrics.progress}%")
    else:
        click.echo(f"  Progress: {metrics.progress}%")

    if assessment.risk_factors:
        click.echo("\nRisk factors:")
        for factor in assessment.risk_factors:
            click.echo(f"  [{factor.severity.value}] {factor.name}: {factor.description}")

    click.echo("\nRecommendations:")
    for recommendation in assessment.recommendations:
        click.echo(f"  - {recommendation}")


def register_commands(cli):
    """Register risk command with main CLI."""
    cli.add_command(risk)
