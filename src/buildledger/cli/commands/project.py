"""Project commands."""

import json

import click
from buildledger.cli.error_handling import handle_domain_error, require_admin, require_ledger_writer
from buildledger.domain.entities import ProjectStatus
from buildledger.domain.errors import DomainError
from buildledger.domain.project import ProjectService
from buildledger.serializers import project_to_json
from buildledger.utils.amount_parser import parse_amount
from buildledger.utils.date_parser import parse_date


def _parse_optional(parser, value):
    return parser(value) if value is not None else None


def _echo_project(project) -> None:
    click.echo(f"Project {project.id}: {project.name}")
    if project.description:
        click.echo(f"  Description: {project.description}")
    click.echo(f"  Status: {project.status.value}")
    click.echo(f"  Budget: ${project.budget:,.2f}")
    click.echo(f"  Spent: ${project.spent:,.2f}")
    click.echo(f"  Progress: {project.progress or 0}%")
    if project.start_date or project.end_date:
        click.echo(f"  Schedule: {project.start_date or '?'} -> {project.end_date or '?'}")


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("create")
@click.argument("name", metavar="PROJECT_NAME")
@click.option("--budget", required=True, help="Project budget")
@click.option("--description", help="Project description")
@click.option("--start", "start_date", help="Start date (YYYY-MM-DD or relative like 'today')")
@click.option("--end", "end_date", help="End date (YYYY-MM-DD or relative like 'in 6 months')")
@click.pass_context
def create_project(ctx, name: str, budget: str, description: str | None, start_date: str | None, end_date: str | None):
    """Create a new project.

    Examples:
        buildledger project create "Harbor Warehouse" --budget 250000 --start today --end "in 6 months"
    """
    require_ledger_writer(ctx)
    service = ProjectService(ctx.obj["db"])

    try:
        project = service.create_project(
            name=name,
            budget=parse_amount(budget),
            description=description,
            start_date=_parse_optional(parse_date, start_date),
            end_date=_parse_optional(parse_date, end_date),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created project '{project.name}' (ID: {project.id})")


@project_group.command("update")
@click.argument("project_id", type=int)
@click.option("--name", help="New project name")
@click.option("--description", help="New description")
@click.option("--budget", help="New budget")
@click.option("--spent", help="Amount spent so far")
@click.option("--progress", type=click.IntRange(0, 100), help="Completion percentage (0-100)")
@click.option("--status", type=click.Choice([s.value for s in ProjectStatus]), help="Project status")
@click.option("--start", "start_date", help="Start date")
@click.option("--end", "end_date", help="End date")
@click.pass_context
def update_project(
    ctx,
    project_id: int,
    name: str | None,
    description: str | None,
    budget: str | None,
    spent: str | None,
    progress: int | None,
    status: str | None,
    start_date: str | None,
    end_date: str | None,
):
    """Update project fields.

    Examples:
        buildledger project update 1 --spent 80000 --progress 40
        buildledger project update 1 --status Completed
    """
    require_ledger_writer(ctx)
    service = ProjectService(ctx.obj["db"])

    try:
        project = service.update_project(
            project_id=project_id,
            name=name,
            description=description,
            budget=_parse_optional(parse_amount, budget),
            spent=_parse_optional(parse_amount, spent),
            progress=progress,
            status=status,
            start_date=_parse_optional(parse_date, start_date),
            end_date=_parse_optional(parse_date, end_date),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated project '{project.name}'")


@project_group.command("delete")
@click.argument("project_id", type=int)
@click.pass_context
def delete_project(ctx, project_id: int):
    """Delete a project. Admin only.

    Projects that invoices still reference cannot be deleted.
    """
    require_admin(ctx)
    service = ProjectService(ctx.obj["db"])

    try:
        project = service.delete_project(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted project '{project.name}'")


@project_group.command("show")
@click.argument("project_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the project as JSON")
@click.pass_context
def show_project(ctx, project_id: int, as_json: bool):
    """Show one project."""
    service = ProjectService(ctx.obj["db"])
    try:
        project = service.require_project(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if as_json:
        click.echo(json.dumps(project_to_json(project), indent=2))
        return
    _echo_project(project)


@project_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in ProjectStatus]), help="Filter by status")
@click.pass_context
def list_projects(ctx, status: str | None):
    """List projects, newest first."""
    service = ProjectService(ctx.obj["db"])
    projects = service.list_projects(status=status)
    if not projects:
        click.echo("No projects found.")
        return

    click.echo(f"\nFound {len(projects)} project(s):")
    click.echo("-" * 90)
    click.echo(f"{'ID':<6} {'Name':<28} {'Status':<10} {'Budget':>15} {'Spent':>15} {'Progress':>9}")
    click.echo("-" * 90)
    for p in projects:
        click.echo(
            f"{p.id:<6} {p.name[:28]:<28} {p.status.value:<10} {f'${p.budget:,.2f}':>15} "
            f"{f'${p.spent:,.2f}':>15} {f'{p.progress or 0}%':>9}"
        )


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
