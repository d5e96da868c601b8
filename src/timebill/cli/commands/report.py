"""Report and trend commands."""

from datetime import date

import click
from timebill.cli.date_filters import PERIOD_FLAGS, parse_date_or_exit, resolve_cli_date_range
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import require_user_or_exit, resolve_company_or_exit
from timebill.domain.analytics import (
    missing_days_this_week,
    percentage_change,
    productivity_by_weekday,
)
from timebill.domain.calendar_range import month_bounds, weekday_name
from timebill.domain.reconciliation import ReconciliationService
from timebill.domain.report import ReportService

TREND_ARROWS = {"up": "↑", "down": "↓", "stable": "→"}


def _format_change(current, previous) -> str:
    change = percentage_change(current, previous)
    return "n/a" if change is None else f"{change:+}%"


@click.command("report")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.option("--period", type=click.Choice(PERIOD_FLAGS), help="Named period instead of explicit dates")
@click.option("--cycle", is_flag=True, help="Report the current billing cycle instead")
@click.option("--details", is_flag=True, help="List entry descriptions per project")
@click.pass_context
def report(
    ctx,
    company: str,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    cycle: bool,
    details: bool,
):
    """Show hours and amounts per project for a period (default: this month).

    Examples:
        timebill report --company Acme --period last-month
        timebill report --company Acme --cycle
    """
    service = ReportService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)

    if cycle:
        if period or start_date or end_date:
            click.echo("Error: --cycle cannot be combined with a date range.", err=True)
            ctx.exit(1)
        try:
            stats = service.billing_cycle_stats(user_id, company_id, date.today())
        except ValueError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Billing cycle {stats.cycle_start.isoformat()} to {stats.cycle_end.isoformat()}")
        click.echo(f"Hours:        {stats.total_hours}")
        click.echo(f"Earnings:     {stats.total_earnings:,.2f}")
        click.echo(f"Days worked:  {stats.days_worked}")
        click.echo(f"Avg per day:  {stats.average_hours_per_day}")
        return

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period,
        default_range=month_bounds(date.today()),
    )
    try:
        result = service.company_report(user_id, company_id, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"{result.company_name}: {result.start_date.isoformat()} to {result.end_date.isoformat()}")
    click.echo(f"Rate: {result.hourly_rate:,.2f}")
    click.echo("-" * 60)
    if not result.projects:
        click.echo("No hours recorded.")
        return
    for summary in result.projects:
        click.echo(f"{summary.project_name:30s} {summary.hours:>8} h {summary.amount:>16,.2f}")
        if details:
            for line in summary.descriptions:
                click.echo(f"    {line}")
    click.echo("-" * 60)
    click.echo(f"{'Total':30s} {result.total_hours:>8} h {result.total_amount:>16,.2f}")


@click.command("trends")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--as-of", default="today", show_default=True, help="Reference date")
@click.option("--by-weekday", is_flag=True, help="Also show productivity per weekday")
@click.pass_context
def trends(ctx, company: str, as_of: str, by_weekday: bool):
    """Compare this week and month with the previous ones."""
    service = ReportService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    reference = parse_date_or_exit(ctx, as_of, "reference date")

    try:
        analysis = service.trends(user_id, company_id, reference)
    except ValueError as e:
        handle_domain_error(ctx, e)

    rows = (
        ("This week", analysis.this_week, analysis.last_week, analysis.weekly_trend),
        ("This month", analysis.this_month, analysis.last_month, analysis.monthly_trend),
    )
    for label, current, previous, trend in rows:
        click.echo(
            f"{label:11s} {current.total_hours:>7} h (prev {previous.total_hours:>7} h) "
            f"{TREND_ARROWS[trend.value]} {_format_change(current.total_hours, previous.total_hours):>8} | "
            f"earnings {current.total_earnings:>14,.2f}"
        )

    entries = ReconciliationService(ctx.obj["db"]).list_entries(user_id, company_id)
    missing = missing_days_this_week(entries, reference)
    if missing:
        click.echo("Missing this week: " + ", ".join(day.strftime("%a %d") for day in missing))

    if by_weekday:
        click.echo("-" * 60)
        for row in productivity_by_weekday(entries):
            click.echo(
                f"{weekday_name(row.weekday):10s} {row.total_hours:>8} h over {row.entry_count:3d} entries "
                f"(avg {row.avg_hours} h)"
            )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report)
    cli.add_command(trends)
