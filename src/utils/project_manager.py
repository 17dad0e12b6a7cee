"""Weekly project submission management."""

import logging
import re
import secrets
from datetime import datetime
from typing import Dict, List, Optional

import pytz
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.project import ProjectModel
from schemas.project import (
    PROJECT_STATUSES,
    Project,
    ProjectCreateRequest,
    ProjectUpdateRequest,
)
from schemas.user import User
from utils.converters import model_to_project

logger = logging.getLogger(__name__)

_PROJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")

# Request field -> column for owner edits. Required columns ignore null,
# optional ones are cleared by it.
_REQUIRED_FIELDS = {
    "title": "title",
    "description": "description",
    "week": "week",
}
_OPTIONAL_FIELDS = {
    "githubRepo": "github_repo",
    "url": "url",
}


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is absent or belongs to someone else."""

    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class InvalidProjectIdError(ValidationError):
    """Raised when a project id is not well formed."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__("Invalid project ID")


class DuplicateWeekError(ConflictError):
    """Raised when the owner already has a project for that week."""

    def __init__(self, week: int):
        self.week = week
        super().__init__(f"You already have a project for week {week}")


def validate_project_id(project_id: str) -> str:
    if not project_id or not _PROJECT_ID_RE.match(project_id):
        raise InvalidProjectIdError(project_id)
    return project_id


class ProjectManager:
    """Manages project submissions using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _week_taken(
        self, user_id: str, week: int, exclude_id: Optional[str] = None
    ) -> bool:
        query = self.db.query(ProjectModel).filter(
            ProjectModel.user_id == user_id,
            ProjectModel.week == week,
        )
        if exclude_id:
            query = query.filter(ProjectModel.project_id != exclude_id)
        return query.first() is not None

    def _commit_week(self, week: int) -> None:
        """Commit, reporting a lost race on the per-week unique constraint."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateWeekError(week) from e

    def _get_owned(self, project_id: str, owner_id: str) -> ProjectModel:
        validate_project_id(project_id)
        model = (
            self.db.query(ProjectModel)
            .filter(
                ProjectModel.project_id == project_id,
                ProjectModel.user_id == owner_id,
            )
            .first()
        )
        if not model:
            raise ProjectNotFoundError(project_id)
        return model

    def _get(self, project_id: str) -> ProjectModel:
        validate_project_id(project_id)
        model = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.project_id == project_id)
            .first()
        )
        if not model:
            raise ProjectNotFoundError(project_id)
        return model

    def create_project(self, owner: User, req: ProjectCreateRequest) -> Project:
        """Submit a project for one week.

        New submissions always start "Under Review". The owner's display name
        is copied onto the project and not kept in sync afterwards.

        Raises:
            DuplicateWeekError: If the owner already has a project that week.
        """
        if self._week_taken(owner.user_id, req.week):
            raise DuplicateWeekError(req.week)

        now = datetime.now(pytz.utc).isoformat()
        model = ProjectModel(
            project_id=secrets.token_hex(12),
            title=req.title,
            description=req.description,
            tech_stack=req.techStack,
            week=req.week,
            status="Under Review",
            github_repo=req.githubRepo,
            url=req.url,
            user_id=owner.user_id,
            user_name=owner.name or owner.email.split("@")[0],
            is_hidden=False,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self._commit_week(req.week)
        self.db.refresh(model)
        logger.info(
            "Created project %s (week=%s, owner=%s)",
            model.project_id, model.week, owner.user_id,
        )
        return model_to_project(model)

    def list_projects_for_owner(self, owner_id: str) -> List[Project]:
        """List an owner's projects by week, hidden ones included."""
        models = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.user_id == owner_id)
            .order_by(ProjectModel.week, ProjectModel.created_at)
            .all()
        )
        return [model_to_project(m) for m in models]

    def list_visible_projects(
        self,
        search: Optional[str] = None,
        week: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Project]:
        """List every project not hidden by an admin, with optional filters.

        Args:
            search: Case-insensitive match on title, repository or owner name.
            week: Exact week number.
            status: Exact status value.
        """
        query = self.db.query(ProjectModel).filter(ProjectModel.is_hidden.is_(False))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    ProjectModel.title.ilike(pattern),
                    ProjectModel.github_repo.ilike(pattern),
                    ProjectModel.user_name.ilike(pattern),
                )
            )
        if week is not None:
            query = query.filter(ProjectModel.week == week)
        if status:
            query = query.filter(ProjectModel.status == status)
        models = query.order_by(ProjectModel.week, ProjectModel.created_at).all()
        return [model_to_project(m) for m in models]

    def update_project(
        self, project_id: str, owner_id: str, req: ProjectUpdateRequest
    ) -> Project:
        """Apply an owner's edits to one of their projects.

        Owner and owner name never change, status is reserved for admins and
        an omitted tech stack keeps its current value.

        Raises:
            InvalidProjectIdError: If the id is malformed.
            ProjectNotFoundError: If the project is not the owner's.
            DuplicateWeekError: If moving to a week that is already taken.
        """
        model = self._get_owned(project_id, owner_id)
        patch = req.model_dump(exclude_unset=True)

        new_week = patch.get("week")
        if new_week is not None and new_week != model.week:
            if self._week_taken(owner_id, new_week, exclude_id=project_id):
                raise DuplicateWeekError(new_week)

        for field, column in _REQUIRED_FIELDS.items():
            if patch.get(field) is not None:
                setattr(model, column, patch[field])
        for field, column in _OPTIONAL_FIELDS.items():
            if field in patch:
                setattr(model, column, patch[field])
        if patch.get("techStack"):
            model.tech_stack = patch["techStack"]

        model.updated_at = datetime.now(pytz.utc).isoformat()
        self._commit_week(model.week)
        self.db.refresh(model)
        logger.info("Updated project %s", project_id)
        return model_to_project(model)

    def set_status(self, project_id: str, status: str) -> Project:
        """Move any project to a new review status. Admin only.

        Raises:
            ValidationError: If the status is not a known value.
            ProjectNotFoundError: If the project does not exist.
        """
        if status not in PROJECT_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        model = self._get(project_id)
        model.status = status
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Project %s status set to %s", project_id, status)
        return model_to_project(model)

    def delete_project(self, project_id: str, owner_id: str) -> None:
        """Permanently delete one of the owner's projects."""
        model = self._get_owned(project_id, owner_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted project %s (owner=%s)", project_id, owner_id)

    def hide_project(self, project_id: str) -> Project:
        """Remove a project from admin listings without deleting it."""
        model = self._get(project_id)
        model.is_hidden = True
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Hid project %s", project_id)
        return model_to_project(model)

    def status_counts(self) -> Dict[str, int]:
        """Count non-hidden projects per status, every status included."""
        counts = {status: 0 for status in PROJECT_STATUSES}
        models = (
            self.db.query(ProjectModel.status)
            .filter(ProjectModel.is_hidden.is_(False))
            .all()
        )
        for (status,) in models:
            counts[status] = counts.get(status, 0) + 1
        return counts
