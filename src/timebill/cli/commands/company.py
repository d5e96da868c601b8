"""Company management commands."""

import click
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import require_user_or_exit, resolve_company_or_exit
from timebill.domain.company import CompanyService
from timebill.utils.number_parser import parse_rate


def _parse_rate_or_exit(ctx, rate: str):
    try:
        return parse_rate(rate)
    except ValueError as e:
        click.echo(f"Error: Invalid rate: {e}", err=True)
        ctx.exit(1)


@click.group()
def company_group():
    """Manage companies (clients)."""
    pass


@company_group.command("create")
@click.argument("name", metavar="COMPANY_NAME")
@click.option("--rate", default="0", help="Hourly rate (e.g., 50000 or $50,000)")
@click.option("--cycle-day", type=int, default=1, show_default=True, help="Day of month a billing cycle starts")
@click.option("--description", help="Free-form description")
@click.pass_context
def create_company(ctx, name: str, rate: str, cycle_day: int, description: str | None):
    """Create a new company.

    Examples:
        timebill company create "Acme" --rate 50000
        timebill company create "Globex" --rate 80 --cycle-day 15
    """
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    hourly_rate = _parse_rate_or_exit(ctx, rate)

    try:
        company_id = service.create_company(
            user_id, name, hourly_rate=hourly_rate, billing_cycle_day=cycle_day, description=description
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created company '{name.strip()}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List the acting user's companies."""
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)

    companies = service.list_companies(user_id)
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\nCompanies:")
    click.echo("-" * 60)
    for company in companies:
        click.echo(
            f"ID: {company.id:3d} | {company.name:20s} | Rate: {company.hourly_rate:>12,.2f} | "
            f"Cycle day: {company.billing_cycle_day}"
        )


@company_group.command("update")
@click.argument("company", metavar="COMPANY")
@click.option("--rate", help="New hourly rate")
@click.option("--cycle-day", type=int, help="New billing cycle day")
@click.option("--description", help="New description")
@click.pass_context
def update_company(ctx, company: str, rate: str | None, cycle_day: int | None, description: str | None):
    """Update a company's rate, billing cycle day or description.

    COMPANY can be a company name or ID. Existing invoices keep their rate.
    """
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    hourly_rate = _parse_rate_or_exit(ctx, rate) if rate is not None else None

    try:
        updated = service.update_company(
            user_id, company_id, hourly_rate=hourly_rate, billing_cycle_day=cycle_day, description=description
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated company '{updated.name}' (rate {updated.hourly_rate:,.2f}, cycle day {updated.billing_cycle_day})")


@company_group.command("billing")
@click.argument("company", metavar="COMPANY")
@click.option("--legal-name", help="Legal name used as invoice client")
@click.option("--tax-id", help="Tax identifier")
@click.option("--address", help="Street address")
@click.option("--city", help="City")
@click.option("--contact-name", help="Billing contact")
@click.option("--contact-email", help="Billing contact email")
@click.pass_context
def set_billing(ctx, company: str, **fields):
    """Configure a company's bill-to profile.

    COMPANY can be a company name or ID.
    """
    service = CompanyService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)

    try:
        service.update_billing_profile(user_id, company_id, **fields)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo("Company billing profile updated")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
