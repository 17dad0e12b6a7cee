"""User management utilities.

This module provides user management functionality including user storage,
credential checks, token issuance and GitHub identity resolution.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import GITHUB_LINK_BY_EMAIL
from core import security
from core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from models.user import UserModel
from schemas.user import User
from utils.converters import model_to_user, user_to_model
from utils.github_oauth import GitHubEmail, GitHubProfile

logger = logging.getLogger(__name__)


class UserNotFoundError(NotFoundError):
    """Exception raised when a user is not found."""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class UserAlreadyExistsError(ConflictError):
    """Exception raised when trying to create a user that already exists."""

    pass


def _now() -> str:
    return datetime.now(pytz.utc).isoformat()


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = "user",
    ) -> User:
        """Create a new local user.

        Args:
            name: Display name.
            email: Email address, unique across users.
            password: Plain text password, stored only as a bcrypt hash.
            role: 'user' or 'admin'.

        Returns:
            Created User object.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        email = email.strip().lower()
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise UserAlreadyExistsError(f"User with email '{email}' already exists")

        user = User(
            name=name.strip(),
            email=email,
            password_hash=security.hash_password(password),
            role=role,
            provider="local",
        )

        # Two registrations racing past the check above still hit the
        # unique constraint on email
        try:
            model = user_to_model(user)
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(
                f"User with email '{email}' already exists"
            ) from e

        logger.info("Created user: %s (role=%s)", user.user_id, role)
        return user

    def ensure_admin(self, email: str, name: str, password: str) -> User:
        """Create the admin account unless a user with that email exists."""
        model = self._get_model_by_email(email)
        if model:
            logger.info("Admin user already exists")
            return model_to_user(model)
        user = self.create_user(name=name, email=email, password=password, role="admin")
        logger.info("Admin user created successfully")
        return user

    def _get_model_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )

    def _get_model(self, user_id: str) -> UserModel:
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if not model:
            raise UserNotFoundError(user_id)
        return model

    def get_user_by_id(self, user_id: str) -> User:
        """Get a user by user ID.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        return model_to_user(self._get_model(user_id))

    def list_users(self) -> List[User]:
        """List all users, oldest first."""
        models = self.db.query(UserModel).order_by(UserModel.created_at).all()
        return [model_to_user(m) for m in models]

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check local credentials and start a new session.

        A failed attempt leaves the stored session untouched.

        Returns:
            Tuple of (user, bearer token).

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong.
        """
        model = self._get_model_by_email(email)
        if model is None or not security.verify_password(password, model.password_hash):
            logger.info("Rejected login attempt")
            raise UnauthorizedError("Invalid credentials")

        token = self._start_session(model)
        self.db.commit()
        logger.info("User logged in: %s", model.user_id)
        return model_to_user(model), token

    def _start_session(self, model: UserModel) -> str:
        """Replace the user's session id and mint a token for it.

        The caller commits.
        """
        token_id = security.new_token_id()
        model.token_id = token_id
        model.updated_at = _now()
        return security.create_access_token(model.user_id, token_id)

    def issue_token(self, user_id: str) -> str:
        """Start a new session for a user, revoking any previous token."""
        model = self._get_model(user_id)
        token = self._start_session(model)
        self.db.commit()
        return token

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user.

        Raises:
            UnauthorizedError: If the token is invalid, expired or superseded.
        """
        user_id, token_id = security.decode_access_token(token)
        model = (
            self.db.query(UserModel)
            .filter(UserModel.user_id == user_id, UserModel.token_id == token_id)
            .first()
        )
        if model is None:
            raise UnauthorizedError("Invalid token")
        return model_to_user(model)

    def revoke_token(self, user_id: str) -> None:
        """End the user's current session."""
        model = self._get_model(user_id)
        model.token_id = None
        model.updated_at = _now()
        self.db.commit()
        logger.info("User logged out: %s", user_id)

    def resolve_github_user(
        self, profile: GitHubProfile, primary_email: GitHubEmail
    ) -> Tuple[User, str]:
        """Find or create the local account for a GitHub identity.

        Lookup order is GitHub id, then email. An email match links the
        GitHub identity onto the existing account, but only when GitHub has
        verified that email and linking is enabled. The user and the new
        session are written in a single commit.

        Args:
            profile: GitHub user profile.
            primary_email: The email GitHub marks as primary.

        Returns:
            Tuple of (user, bearer token).

        Raises:
            UpstreamError: If linking is refused for an unverified email.
            ConflictError: If linking by email is disabled.
        """
        github_id = str(profile.id)
        email = primary_email.email.strip().lower()
        now = _now()

        model = (
            self.db.query(UserModel)
            .filter(UserModel.github_id == github_id)
            .first()
        )
        if model is None:
            model = self._get_model_by_email(email)
            if model is not None:
                if not GITHUB_LINK_BY_EMAIL:
                    raise ConflictError(
                        "An account with this email already exists"
                    )
                if not primary_email.verified:
                    raise UpstreamError("GitHub primary email is not verified")
                model.github_id = github_id
                model.provider = "github"
                model.avatar = profile.avatar_url
                logger.info("Linked GitHub account %s to user %s", github_id, model.user_id)
            else:
                user = User(
                    name=profile.name or profile.login,
                    email=email,
                    role="user",
                    provider="github",
                    github_id=github_id,
                    avatar=profile.avatar_url,
                    created_at=now,
                    updated_at=now,
                )
                model = user_to_model(user)
                self.db.add(model)
                logger.info("Creating user from GitHub account %s", github_id)

        token = self._start_session(model)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("GitHub account could not be saved") from e

        logger.info("Saved GitHub user %s with new session", model.user_id)
        return model_to_user(model), token
