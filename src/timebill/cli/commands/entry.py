"""Single-date hour entry commands."""

from datetime import date

import click
from timebill.cli.date_filters import (
    PERIOD_FLAGS,
    parse_date_or_exit,
    parse_hours_or_exit,
    resolve_cli_date_range,
)
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import (
    require_user_or_exit,
    resolve_company_or_exit,
    resolve_project_or_exit,
)
from timebill.domain.calendar_range import month_bounds
from timebill.domain.entities import ReconcileMode
from timebill.domain.reconciliation import ReconciliationService

MODE_CHOICES = [mode.value for mode in ReconcileMode]


def _format_change(change) -> str:
    old = "-" if change.old_value is None else f"{change.old_value} h"
    new = "-" if change.new_value is None else f"{change.new_value} h"
    return f"{change.date.isoformat()}: {old} -> {new}"


@click.group()
def entry_group():
    """Log, remove and list hour entries."""
    pass


@entry_group.command("log")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--date", "date_str", default="today", show_default=True, help="Entry date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--hours", required=True, help="Hours worked (e.g., 7.5, 7:30 or 7h30m)")
@click.option("--project", help="Project name or ID (omit for unassigned hours)")
@click.option("--description", help="What was worked on")
@click.option(
    "--mode",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=ReconcileMode.SET.value,
    show_default=True,
    help="How to treat an existing entry: overwrite, add to it, or refuse",
)
@click.pass_context
def log_hours(ctx, company: str, date_str: str, hours: str, project: str | None, description: str | None, mode: str):
    """Log hours for one date.

    Examples:
        timebill entry log --company Acme --hours 8
        timebill entry log --company Acme --date yesterday --hours 2 --mode accumulate
        timebill entry log --company Acme --date 2024-03-01 --hours 6 --project Website --mode error
    """
    service = ReconciliationService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    entry_date = parse_date_or_exit(ctx, date_str)
    value = parse_hours_or_exit(ctx, hours)

    try:
        change = service.reconcile(
            user_id, company_id, entry_date, value, mode=ReconcileMode(mode.lower()),
            project_id=project_id, description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(_format_change(change))


@entry_group.command("delete")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--date", "date_str", required=True, help="Entry date")
@click.option("--project", help="Project name or ID (omit for unassigned hours)")
@click.pass_context
def delete_entry(ctx, company: str, date_str: str, project: str | None):
    """Delete the entry for one date."""
    service = ReconciliationService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    entry_date = parse_date_or_exit(ctx, date_str)

    try:
        change = service.delete_entry(user_id, company_id, entry_date, project_id=project_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {_format_change(change)}")


@entry_group.command("list")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--project", help="Only entries of this project")
@click.option("--unassigned", is_flag=True, help="Only entries without a project")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.option("--period", type=click.Choice(PERIOD_FLAGS), help="Named period instead of explicit dates")
@click.pass_context
def list_entries(
    ctx,
    company: str,
    project: str | None,
    unassigned: bool,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List hour entries, defaulting to the current month."""
    if project and unassigned:
        click.echo("Error: --project cannot be combined with --unassigned.", err=True)
        ctx.exit(1)

    service = ReconciliationService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period,
        default_range=month_bounds(date.today()),
    )

    try:
        entries = service.list_entries(
            user_id, company_id, start, end, project_id=project_id, unassigned=unassigned
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No entries found.")
        return

    for entry in entries:
        bucket = f"project {entry.project_id}" if entry.project_id is not None else "unassigned"
        click.echo(
            f"{entry.date.isoformat()} {entry.date.strftime('%a')} | {entry.hours:>6} h | "
            f"{bucket:12s} | {entry.description or ''}"
        )
    click.echo(f"Total: {sum(e.hours for e in entries)} h over {len(entries)} entries")


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
