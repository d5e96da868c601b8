"""Invoice commands."""

from datetime import date

import click
from timebill.cli.date_filters import PERIOD_FLAGS, parse_date_or_exit, resolve_cli_date_range
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import (
    require_user_or_exit,
    resolve_company_or_exit,
    resolve_project_or_exit,
)
from timebill.domain.calendar_range import previous_month_bounds
from timebill.domain.invoice import DEFAULT_CONCEPT, InvoiceService


def _show(invoice) -> None:
    click.echo(f"Invoice {invoice.number} [{invoice.status.value}]")
    click.echo(f"Issued:  {invoice.issue_date.isoformat()}")
    click.echo(f"Period:  {invoice.period_start.isoformat()} to {invoice.period_end.isoformat()}")
    if invoice.project_name:
        click.echo(f"Project: {invoice.project_name}")
    click.echo(f"From:    {invoice.issuer_name} ({invoice.issuer_id_type} {invoice.issuer_id_number})")
    client = invoice.client_name
    if invoice.client_tax_id:
        client += f" ({invoice.client_tax_id})"
    click.echo(f"To:      {client}")
    click.echo("-" * 60)
    for item in invoice.items:
        click.echo(f"{item.concept:30s} {item.hours:>8} h x {item.rate:>12,.2f} = {item.total:>14,.2f}")
    click.echo("-" * 60)
    click.echo(f"{'Total':30s} {invoice.total_hours:>8} h {'':15s} {invoice.total_amount:>14,.2f}")


@click.group()
def invoice_group():
    """Create invoices and manage their status."""
    pass


@invoice_group.command("create")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--project", help="Only bill this project (default: all hours of the company)")
@click.option("--start-date", help="Period start (YYYY-MM-DD or relative)")
@click.option("--end-date", help="Period end, inclusive")
@click.option("--period", type=click.Choice(PERIOD_FLAGS), help="Named period instead of explicit dates")
@click.option("--concept", default=DEFAULT_CONCEPT, show_default=True, help="Line item concept")
@click.option("--issue-date", help="Issue date (default: today)")
@click.pass_context
def create_invoice(
    ctx,
    company: str,
    project: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    concept: str,
    issue_date: str | None,
):
    """Create a draft invoice from the hours of a period.

    Without a period the previous calendar month is billed.

    Examples:
        timebill invoice create --company Acme
        timebill invoice create --company Acme --start-date 2024-03-01 --end-date 2024-03-15 --project Website
    """
    service = InvoiceService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company)
    project_id = resolve_project_or_exit(ctx, user_id, company_id, project)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period,
        default_range=previous_month_bounds(date.today()),
    )
    issued = parse_date_or_exit(ctx, issue_date, "issue date") if issue_date else None

    try:
        invoice = service.create_invoice(
            user_id, company_id, start, end, project_id=project_id, concept=concept, issue_date=issued
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created invoice {invoice.number}: {invoice.total_hours} h, {invoice.total_amount:,.2f}")


@invoice_group.command("list")
@click.option("--company", help="Only invoices of this company")
@click.pass_context
def list_invoices(ctx, company: str | None):
    """List invoices, newest number first."""
    service = InvoiceService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    company_id = resolve_company_or_exit(ctx, user_id, company) if company else None

    invoices = service.list_invoices(user_id, company_id=company_id)
    if not invoices:
        click.echo("No invoices found.")
        return

    for invoice in invoices:
        click.echo(
            f"ID: {invoice.id:3d} | {invoice.number:>5s} | {invoice.status.value:9s} | "
            f"{invoice.period_start.isoformat()}..{invoice.period_end.isoformat()} | "
            f"{invoice.client_name:20s} | {invoice.total_hours:>7} h | {invoice.total_amount:>14,.2f}"
        )


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_invoice(ctx, invoice_id: int):
    """Show an invoice with its line items."""
    service = InvoiceService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)

    try:
        invoice = service.get_invoice(user_id, invoice_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    _show(invoice)


def _status_command(name: str, method: str, help_text: str):
    @invoice_group.command(name, help=help_text)
    @click.argument("invoice_id", type=int)
    @click.pass_context
    def command(ctx, invoice_id: int):
        service = InvoiceService(ctx.obj["db"])
        user_id = require_user_or_exit(ctx)
        try:
            invoice = getattr(service, method)(user_id, invoice_id)
        except ValueError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Invoice {invoice.number} is now {invoice.status.value}")

    return command


_status_command("send", "mark_sent", "Mark a draft invoice as sent. Its hours become locked.")
_status_command("pay", "mark_paid", "Mark a sent invoice as paid.")
_status_command("cancel", "cancel", "Cancel a draft or sent invoice.")


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: int, yes: bool):
    """Delete a draft invoice."""
    service = InvoiceService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)

    try:
        invoice = service.get_invoice(user_id, invoice_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete invoice {invoice.number}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_invoice(user_id, invoice_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted invoice {invoice.number}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
