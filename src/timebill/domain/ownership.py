"""Ownership resolution for the user -> company -> project hierarchy."""

from typing import Optional

from timebill.database.base import Database
from timebill.domain.entities import Company, Project
from timebill.domain.errors import NotFoundError, company_not_found, project_not_found


class OwnershipResolver:
    """Gate that every mutating call path goes through.

    A missing entity and an entity owned by someone else produce the same
    NotFoundError, so callers cannot probe other tenants' data.
    """

    def __init__(self, db: Database):
        """Initialize ownership resolver.

        Args:
            db: Database instance
        """
        self.db = db

    def resolve_company(self, user_id: int, company_id: int) -> Company:
        """Return the company if it belongs to the user.

        Raises:
            NotFoundError: If the company is missing or owned by another user
        """
        company = self.db.get_company(company_id)
        if company is None or company.user_id != user_id:
            raise NotFoundError(company_not_found(company_id))
        return company

    def resolve_project(self, user_id: int, company_id: int, project_id: int) -> Project:
        """Return the project if it belongs to the user and to the given company.

        A project of another company is rejected, never reassigned.

        Raises:
            NotFoundError: If the company or project does not resolve
        """
        self.resolve_company(user_id, company_id)
        project = self.db.get_project(project_id)
        if project is None or project.user_id != user_id or project.company_id != company_id:
            raise NotFoundError(project_not_found(project_id))
        return project

    def resolve_optional_project(
        self, user_id: int, company_id: int, project_id: Optional[int]
    ) -> tuple[Company, Optional[Project]]:
        """Resolve a company and, if given, one of its projects.

        ``project_id=None`` stands for the unassigned-project bucket.
        """
        company = self.resolve_company(user_id, company_id)
        if project_id is None:
            return company, None
        return company, self.resolve_project(user_id, company_id, project_id)
