"""CLI helpers for date and hours option parsing."""

from datetime import date
from decimal import Decimal

import click

from timebill.utils.date_parser import get_date_range, parse_date
from timebill.utils.number_parser import parse_hours

PERIOD_FLAGS = ("this-week", "last-week", "this-month", "last-month", "this-year", "last-year")


def parse_date_or_exit(ctx, value: str, label: str = "date") -> date:
    """Parse an absolute or relative date option, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_hours_or_exit(ctx, value: str) -> Decimal:
    """Parse an hours option ("7.5", "7:30", "7h30m"), or exit with a CLI error."""
    try:
        return parse_hours(value)
    except ValueError as e:
        click.echo(f"Error: Invalid hours: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date, date]:
    """Resolve a CLI date range from a named period or explicit dates.

    Exactly one way of giving the range is accepted. Without either, the
    default range is used; with no default the command fails.
    """
    if period and (start_date or end_date):
        click.echo(
            "Error: --period cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period:
        try:
            return get_date_range(period)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    if start_date or end_date:
        if not (start_date and end_date):
            click.echo("Error: Both --start-date and --end-date are required.", err=True)
            ctx.exit(1)
        return (
            parse_date_or_exit(ctx, start_date, "start date"),
            parse_date_or_exit(ctx, end_date, "end date"),
        )

    if default_range is None:
        click.echo("Error: Specify --period or --start-date and --end-date.", err=True)
        ctx.exit(1)
    return default_range
