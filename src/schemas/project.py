"""Project schema definitions."""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from config import MAX_WEEK, MIN_WEEK

ProjectStatus = Literal["Not Started", "Under Review", "Approved"]
PROJECT_STATUSES = ("Not Started", "Under Review", "Approved")


class Project(BaseModel):
    id: str
    title: str
    description: str
    techStack: str
    week: int
    status: ProjectStatus
    githubRepo: Optional[str] = None
    url: Optional[str] = None
    userId: str
    userName: str
    isHidden: bool = False
    createdAt: str
    updatedAt: str


class ProjectCreateRequest(BaseModel):
    """Body of POST /api/projects. Status and owner are set by the server."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    techStack: str = Field(min_length=1)
    week: int = Field(ge=MIN_WEEK, le=MAX_WEEK)
    githubRepo: Optional[str] = None
    url: Optional[str] = None


class ProjectUpdateRequest(BaseModel):
    """Partial update. Owners edit content; admins only send ``status``."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    techStack: Optional[str] = None
    week: Optional[int] = Field(default=None, ge=MIN_WEEK, le=MAX_WEEK)
    githubRepo: Optional[str] = None
    url: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectStatsResponse(BaseModel):
    total: int
    counts: Dict[str, int]
