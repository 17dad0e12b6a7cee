"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import chat_manager
from utils import github_oauth
from utils import project_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_project_manager(db: Session = Depends(get_db)) -> project_manager.ProjectManager:
    """Get ProjectManager instance with request-scoped DB session."""
    return project_manager.ProjectManager(db)


def get_chat_manager(db: Session = Depends(get_db)) -> chat_manager.ChatManager:
    """Get ChatManager instance with request-scoped DB session."""
    return chat_manager.ChatManager(db)


def get_github_client() -> github_oauth.GitHubOAuthClient:
    """Get a GitHub OAuth client built from configuration."""
    return github_oauth.GitHubOAuthClient()


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
ProjectManagerDep = Annotated[
    project_manager.ProjectManager, Depends(get_project_manager)
]
ChatManagerDep = Annotated[
    chat_manager.ChatManager, Depends(get_chat_manager)
]
GitHubClientDep = Annotated[
    github_oauth.GitHubOAuthClient, Depends(get_github_client)
]
