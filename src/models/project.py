"""Weekly project submission database model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class ProjectModel(Base):
    __tablename__ = "projects"
    __table_args__ = (
        # One submission per user per week
        UniqueConstraint("user_id", "week", name="uq_projects_user_week"),
    )

    project_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    tech_stack = Column(String, nullable=False)
    week = Column(Integer, index=True, nullable=False)
    status = Column(String, nullable=False, default="Under Review")
    github_repo = Column(String, nullable=True)
    url = Column(String, nullable=True)

    user_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    # Owner name as it was when the project was submitted
    user_name = Column(String, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    owner = relationship("UserModel", backref="projects")
