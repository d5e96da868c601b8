"""Project management commands."""

import click
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import require_user_or_exit, resolve_company_or_exit
from timebill.domain.company import CompanyService


@click.group()
def project_group():
    """Manage projects within a company."""
    pass


@project_group.command("create")
@click.argument("company", metavar="COMPANY")
@click.argument("name", metavar="PROJECT_NAME")
@click.pass_context
def create_project(ctx, company: str, name: str):
    """Create a project under COMPANY (name or ID).

    Examples:
        timebill project create Acme "Website redesign"
    """
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)

    try:
        project_id = service.create_project(user_id, company_id, name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created project '{name.strip()}' (ID: {project_id})")


@project_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def list_projects(ctx, company: str):
    """List the projects of COMPANY."""
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)

    projects = service.list_projects(user_id, company_id)
    if not projects:
        click.echo("No projects found.")
        return

    for project in projects:
        click.echo(f"ID: {project.id:3d} | {project.name}")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
