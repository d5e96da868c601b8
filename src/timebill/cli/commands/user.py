"""User management commands."""

import click
from timebill.cli.error_handling import handle_domain_error
from timebill.cli.resolution import require_user_or_exit
from timebill.domain.user import UserService


@click.group()
def user_group():
    """Manage users and the issuer billing profile."""
    pass


@user_group.command("create")
@click.argument("email")
@click.argument("name")
@click.pass_context
def create_user(ctx, email: str, name: str):
    """Register a new user.

    Examples:
        timebill user create ana@example.com "Ana Gómez"
    """
    service = UserService(ctx.obj["db"])

    try:
        user_id = service.create_user(email=email, name=name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user '{email.strip().lower()}' (ID: {user_id})")


@user_group.command("show")
@click.pass_context
def show_user(ctx):
    """Show the acting user and their billing profile."""
    service = UserService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)
    user = service.require_user(user_id)

    click.echo(f"ID: {user.id} | {user.name} <{user.email}>")
    profile = service.get_billing_profile(user_id)
    if profile is None:
        click.echo("Billing profile: not configured")
        return

    click.echo("Billing profile:")
    for label, value in (
        ("Name", profile.name),
        ("ID", f"{profile.id_type} {profile.id_number}"),
        ("Address", profile.address),
        ("City", profile.city),
        ("Phone", profile.phone),
        ("Bank", profile.bank_name),
        ("Account", " ".join(v for v in (profile.account_type, profile.account_number) if v) or None),
    ):
        if value:
            click.echo(f"  {label + ':':10s} {value}")


@user_group.command("billing")
@click.option("--name", required=True, help="Legal name shown on invoices")
@click.option("--id-type", required=True, help="Identification type (e.g., CC, NIT, SSN)")
@click.option("--id-number", required=True, help="Identification number")
@click.option("--address", help="Street address")
@click.option("--city", help="City")
@click.option("--phone", help="Phone number")
@click.option("--bank-name", help="Bank for payment")
@click.option("--account-type", help="Bank account type")
@click.option("--account-number", help="Bank account number")
@click.option("--signature-image", help="Path or URL of a signature image")
@click.option("--declaration", help="Legal declaration printed on invoices")
@click.pass_context
def set_billing(ctx, **fields):
    """Configure the issuer billing profile of the acting user.

    Existing invoices keep the profile they were issued with.

    Examples:
        timebill --user ana@example.com user billing --name "Ana Gómez" --id-type CC --id-number 123
    """
    service = UserService(ctx.obj["db"])
    user_id = require_user_or_exit(ctx)

    try:
        service.update_billing_profile(user_id, **fields)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo("Billing profile updated")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
