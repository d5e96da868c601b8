"""Weekday average commands."""

from datetime import date

import click
from timebill.cli.date_filters import parse_date_or_exit
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import (
    require_user_or_exit,
    resolve_company_or_exit,
    resolve_project_or_exit,
)
from timebill.domain.averages import WeekdayAverageService
from timebill.domain.calendar_range import canonical_weekday, weekday_name


@click.command("averages")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--exclude-month", help="Leave out the month containing this date (YYYY-MM-DD or relative)")
@click.pass_context
def show_averages(ctx, company: str, exclude_month: str | None):
    """Show average hours per weekday over the company's history."""
    service = WeekdayAverageService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    excluded = parse_date_or_exit(ctx, exclude_month, "month") if exclude_month else None

    try:
        averages = service.compute_averages(user_id, company_id, exclude_month=excluded)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not averages:
        click.echo("No entries recorded yet.")
        return

    for weekday in range(7):
        average = averages.get(weekday)
        if average is None:
            click.echo(f"{weekday_name(weekday):10s} {'-':>6}")
        else:
            click.echo(
                f"{weekday_name(weekday):10s} {average.average:>6} h  ({average.entry_count} entries, {average.total_hours} h)"
            )


@click.command("fill-average")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--start-date", required=True, help="First date (YYYY-MM-DD or relative)")
@click.option("--end-date", required=True, help="Last date, inclusive")
@click.option("--project", help="Project name or ID (omit for unassigned hours)")
@click.option("--overwrite", is_flag=True, help="Replace existing entries with the average")
@click.option(
    "--exclude-current-month",
    is_flag=True,
    help="Compute averages without the month of the start date",
)
@click.pass_context
def fill_average(
    ctx,
    company: str,
    start_date: str,
    end_date: str,
    project: str | None,
    overwrite: bool,
    exclude_current_month: bool,
):
    """Fill dates with the historical average of their weekday.

    Dates that already have an entry are left alone unless --overwrite is
    given. Ranges are limited to 31 days. Dates that cannot be written, such
    as dates covered by a sent invoice, are listed and the command exits 1.

    Examples:
        timebill fill-average --company Acme --start-date 2024-03-01 --end-date 2024-03-31
    """
    service = WeekdayAverageService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    start: date = parse_date_or_exit(ctx, start_date, "start date")
    end: date = parse_date_or_exit(ctx, end_date, "end date")

    try:
        result = service.fill_with_averages(
            user_id,
            company_id,
            start,
            end,
            overwrite=overwrite,
            project_id=project_id,
            exclude_month=start if exclude_current_month else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not result.changes and result.ok:
        click.echo("Nothing to fill.")
        return
    for change in result.changes:
        previous = "" if change.old_value is None else f" (was {change.old_value} h)"
        click.echo(f"{change.date.isoformat()} {weekday_name(canonical_weekday(change.date)):10s} {change.new_value} h{previous}")
    click.echo(f"Filled {len(result.changes)} date(s)")
    for failure in result.failures:
        click.echo(f"  {failure.date.isoformat()}: {failure.reason}", err=True)
    if not result.ok:
        ctx.exit(1)


def register_commands(cli):
    """Register average commands with main CLI."""
    cli.add_command(show_averages)
    cli.add_command(fill_average)
