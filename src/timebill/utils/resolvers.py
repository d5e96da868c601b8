"""Utilities for resolving user and company references to IDs."""

from timebill.domain.company import CompanyService
from timebill.domain.errors import NotFoundError, company_not_found, project_not_found, user_not_found
from timebill.domain.user import UserService


def resolve_user(user_service: UserService, user: str | int) -> int:
    """Resolve a user email or ID to a user ID.

    Raises:
        NotFoundError: If the user is not found
    """
    if isinstance(user, int) or str(user).strip().isdigit():
        user_id = int(user)
        if user_service.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))
        return user_id

    found = user_service.get_user_by_email(str(user))
    if found is None:
        raise NotFoundError(user_not_found(user))
    return found.id


def resolve_company(company_service: CompanyService, user_id: int, company: str | int) -> int:
    """Resolve a company name or ID, among the user's companies, to a company ID.

    Raises:
        NotFoundError: If the user has no such company
    """
    if isinstance(company, int) or str(company).strip().isdigit():
        return company_service.get_company(user_id, int(company)).id

    for candidate in company_service.list_companies(user_id):
        if candidate.name == company:
            return candidate.id

    raise NotFoundError(company_not_found(company))


def resolve_project(company_service: CompanyService, user_id: int, company_id: int, project: str | int) -> int:
    """Resolve a project name or ID within a company to a project ID."""
    projects = company_service.list_projects(user_id, company_id)
    if isinstance(project, int) or str(project).strip().isdigit():
        for candidate in projects:
            if candidate.id == int(project):
                return candidate.id
    else:
        for candidate in projects:
            if candidate.name == project:
                return candidate.id

    raise NotFoundError(project_not_found(project))
