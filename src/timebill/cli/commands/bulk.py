"""Bulk hour entry command."""

import click
from timebill.cli.date_filters import parse_date_or_exit, parse_hours_or_exit
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import (
    require_user_or_exit,
    resolve_company_or_exit,
    resolve_project_or_exit,
)
from timebill.domain.entities import ReconcileMode
from timebill.domain.reconciliation import BULK_DESCRIPTION, ReconciliationService

MODE_CHOICES = [mode.value for mode in ReconcileMode]


@click.command("bulk")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--start-date", required=True, help="First date (YYYY-MM-DD or relative)")
@click.option("--end-date", required=True, help="Last date, inclusive")
@click.option("--hours", required=True, help="Hours for every matching date")
@click.option(
    "--weekday",
    "weekdays",
    multiple=True,
    help="Only these weekdays; repeatable, any supported language (e.g., mon, lunes, Montag)",
)
@click.option("--project", help="Project name or ID (omit for unassigned hours)")
@click.option("--description", default=BULK_DESCRIPTION, show_default=True, help="Description for written entries")
@click.option(
    "--mode",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=ReconcileMode.SET.value,
    show_default=True,
    help="How to treat existing entries",
)
@click.option("--skip-existing", is_flag=True, help="Skip dates that already have an entry instead of failing them")
@click.option("--fail-fast", is_flag=True, help="Write nothing unless every date can be written")
@click.pass_context
def bulk_entry(
    ctx,
    company: str,
    start_date: str,
    end_date: str,
    hours: str,
    weekdays: tuple[str, ...],
    project: str | None,
    description: str,
    mode: str,
    skip_existing: bool,
    fail_fast: bool,
):
    """Log the same hours for every date in a range.

    Each date is reconciled on its own; dates that fail are reported and the
    command exits with status 1 if any failed.

    Examples:
        timebill bulk --company Acme --start-date 2024-03-01 --end-date 2024-03-31 --hours 8 --weekday mon --weekday tue
        timebill bulk --company Acme --start-date "last month" --end-date yesterday --hours 4 --mode error --skip-existing
    """
    service = ReconciliationService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")
    value = parse_hours_or_exit(ctx, hours)

    try:
        result = service.reconcile_range(
            user_id,
            company_id,
            start,
            end,
            value,
            weekdays=weekdays or None,
            mode=ReconcileMode(mode.lower()),
            skip_existing=skip_existing,
            fail_fast=fail_fast,
            project_id=project_id,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Written: {len(result.changes)}  Skipped: {len(result.skipped)}  Failed: {len(result.failures)}")
    for failure in result.failures:
        click.echo(f"  {failure.date.isoformat()}: {failure.reason}", err=True)
    if not result.ok:
        ctx.exit(1)


def register_commands(cli):
    """Register bulk command with main CLI."""
    cli.add_command(bulk_entry)
