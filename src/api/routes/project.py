"""Project submission routes.

Regular users manage their own weekly submissions. Admins see every
non-hidden project, change review status and hide projects.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.routes.auth import get_current_user, require_admin
from config import MAX_WEEK, MIN_WEEK
from core.dependencies import ProjectManagerDep
from core.exceptions import ValidationError
from schemas.project import (
    Project,
    ProjectCreateRequest,
    ProjectStatsResponse,
    ProjectStatus,
    ProjectUpdateRequest,
)
from schemas.user import User
from utils.project_manager import (
    DuplicateWeekError,
    InvalidProjectIdError,
    ProjectNotFoundError,
)

router = APIRouter(prefix="/api/projects", tags=["Project"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Project not found",
    )


def _invalid_id() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid project ID",
    )


@router.get("", response_model=List[Project], summary="List projects")
def list_projects(
    project_manager: ProjectManagerDep,
    search: Optional[str] = None,
    week: Optional[int] = Query(default=None, ge=MIN_WEEK, le=MAX_WEEK),
    status_filter: Optional[ProjectStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
) -> List[Project]:
    """List the caller's projects.

    Admins get every project that is not hidden instead, optionally
    filtered by search text, week and status.
    """
    if current_user.role == "admin":
        return project_manager.list_visible_projects(
            search=search, week=week, status=status_filter
        )
    return project_manager.list_projects_for_owner(current_user.user_id)


@router.get("/stats", response_model=ProjectStatsResponse, summary="Status counters")
def project_stats(
    project_manager: ProjectManagerDep,
    admin: User = Depends(require_admin),
) -> ProjectStatsResponse:
    counts = project_manager.status_counts()
    return ProjectStatsResponse(total=sum(counts.values()), counts=counts)


@router.post(
    "",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a project",
)
def create_project(
    req: ProjectCreateRequest,
    project_manager: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> Project:
    """Submit a project for one week. It starts "Under Review".

    Raises:
        HTTPException: 409 if the caller already has a project that week.
    """
    try:
        return project_manager.create_project(current_user, req)
    except DuplicateWeekError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.put("/{project_id}", response_model=Project, summary="Update a project")
def update_project(
    project_id: str,
    req: ProjectUpdateRequest,
    project_manager: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> Project:
    """Update a project.

    For admins this changes the review status of any project and requires
    ``status`` in the body. For everyone else it edits one of their own
    projects; projects of other users are reported as not found.

    Raises:
        HTTPException: 400 for a malformed id or missing status, 404 if the
            project is not found, 409 on a week clash.
    """
    try:
        if current_user.role == "admin":
            if req.status is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Status is required",
                )
            return project_manager.set_status(project_id, req.status)
        return project_manager.update_project(project_id, current_user.user_id, req)
    except InvalidProjectIdError:
        raise _invalid_id()
    except ProjectNotFoundError:
        raise _not_found()
    except DuplicateWeekError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{project_id}", summary="Delete or hide a project")
def delete_project(
    project_id: str,
    project_manager: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    """Delete one of the caller's projects.

    Admins hide the project from admin listings instead; the record is kept.
    """
    try:
        if current_user.role == "admin":
            project_manager.hide_project(project_id)
            return {"message": "Project hidden from admin view"}
        project_manager.delete_project(project_id, current_user.user_id)
    except InvalidProjectIdError:
        raise _invalid_id()
    except ProjectNotFoundError:
        raise _not_found()
    return {"message": "Project deleted successfully"}
