"""CLI helpers for resolving the acting user, companies and projects."""

from __future__ import annotations

import click
from timebill.cli.error_handling import handle_domain_error
from timebill.domain.company import CompanyService
from timebill.domain.user import UserService
from timebill.utils.resolvers import resolve_company, resolve_project, resolve_user


def require_user_or_exit(ctx: click.Context) -> int:
    """Resolve the acting user from --user / TIMEBILL_USER, or exit with a CLI error."""
    user_ref = ctx.obj.get("user_ref")
    if not user_ref:
        click.echo("Error: No user selected. Pass --user or set TIMEBILL_USER.", err=True)
        ctx.exit(1)

    try:
        return resolve_user(UserService(ctx.obj["db"]), user_ref)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_company_or_exit(ctx: click.Context, user_id: int, company: str | int) -> int:
    """Resolve company name or ID for the acting user, or exit with a CLI error."""
    try:
        return resolve_company(CompanyService(ctx.obj["db"]), user_id, company)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_project_or_exit(
    ctx: click.Context, user_id: int, company_id: int, project: str | int | None
) -> int | None:
    """Resolve an optional project name or ID within a company.

    Returns None when no project was given (the unassigned bucket).
    """
    if project is None:
        return None
    try:
        return resolve_project(CompanyService(ctx.obj["db"]), user_id, company_id, project)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
