"""Project domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError

from buildledger.database.base import Database
from buildledger.domain.entities import Project as ProjectEntity, ProjectStatus
from buildledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    project_has_invoices,
    project_not_found,
)


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_project(
        self,
        name: str,
        budget: Decimal,
        description: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProjectEntity:
        """Create a new project.

        Raises:
            ValidationError: If name or budget is missing, or budget is negative
        """
        if not name or not name.strip():
            raise ValidationError("Project name is required")
        if budget is None:
            raise ValidationError("Project budget is required")
        if budget < 0:
            raise ValidationError("Project budget cannot be negative")
        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValidationError("Project end date cannot be before its start date")

        project_id = self.db.create_project(
            name=name,
            budget=budget,
            description=description,
            start_date=start_date,
            end_date=end_date,
        )
        return self.db.get_project(project_id)

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        return self.db.get_project(project_id)

    def require_project(self, project_id: int) -> ProjectEntity:
        """Get project by ID or raise NotFoundError."""
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return project

    def list_projects(self, status: Optional[str] = None) -> list[ProjectEntity]:
        """List projects newest first, optionally filtered by status."""
        if status is not None:
            status = self._parse_status(status).value
        return self.db.list_projects(status=status)

    def update_project(
        self,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[Decimal] = None,
        spent: Optional[Decimal] = None,
        progress: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProjectEntity:
        """Update project fields. Fields left as None are unchanged.

        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If a value is out of range
        """
        project = self.require_project(project_id)

        if name is not None and not name.strip():
            raise ValidationError("Project name cannot be empty")
        if budget is not None and budget < 0:
            raise ValidationError("Project budget cannot be negative")
        if spent is not None and spent < 0:
            raise ValidationError("Project spent amount cannot be negative")
        if progress is not None and not 0 <= progress <= 100:
            raise ValidationError("Project progress must be between 0 and 100")
        status_value = self._parse_status(status).value if status is not None else None

        new_start = start_date if start_date is not None else project.start_date
        new_end = end_date if end_date is not None else project.end_date
        if new_start is not None and new_end is not None and new_end < new_start:
            raise ValidationError("Project end date cannot be before its start date")

        self.db.update_project(
            project_id=project_id,
            name=name,
            description=description,
            budget=budget,
            spent=spent,
            progress=progress,
            status=status_value,
            start_date=start_date,
            end_date=end_date,
        )
        return self.db.get_project(project_id)

    def delete_project(self, project_id: int) -> ProjectEntity:
        """Delete a project that no invoice references.

        Returns:
            The project as it was before deletion

        Raises:
            NotFoundError: If the project does not exist
            ConflictError: If invoices still reference the project
        """
        project = self.require_project(project_id)

        invoices = self.db.list_invoices(project_id=project_id)
        if invoices:
            raise ConflictError(project_has_invoices(project_id, len(invoices)))

        try:
            with self.db.unit_of_work():
                if not self.db.delete_project(project_id):
                    raise NotFoundError(project_not_found(project_id))
        except IntegrityError as exc:
            count = len(self.db.list_invoices(project_id=project_id))
            raise ConflictError(project_has_invoices(project_id, count)) from exc
        return project

    @staticmethod
    def _parse_status(status: str) -> ProjectStatus:
        try:
            return ProjectStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in ProjectStatus)
            raise ValidationError(f"Unknown project status '{status}'. Allowed: {allowed}")
