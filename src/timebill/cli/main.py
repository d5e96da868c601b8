"""Main CLI entry point."""

import logging

import click
from timebill.database.factories import create_sqlite_database

# Import and register all commands at module level
from timebill.cli.commands import (
    user,
    company,
    project,
    entry,
    bulk,
    averages,
    invoice,
    report,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TIMEBILL_DB_PATH environment variable)",
    envvar="TIMEBILL_DB_PATH",
)
@click.option(
    "--user",
    "user_ref",
    help="Acting user email or ID (overrides TIMEBILL_USER environment variable)",
    envvar="TIMEBILL_USER",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (overrides TIMEBILL_LOG_LEVEL environment variable)",
    envvar="TIMEBILL_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_ref: str | None, log_level: str):
    """Timebill - Freelancer hours tracking and invoicing.

    Log hours per company and project, fill gaps from weekday averages,
    and turn a period's hours into numbered invoices.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["user_ref"] = user_ref

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
company.register_commands(cli)
project.register_commands(cli)
entry.register_commands(cli)
bulk.register_commands(cli)
averages.register_commands(cli)
invoice.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
